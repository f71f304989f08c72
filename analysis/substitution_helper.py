"""Vertretungshelfer: schlägt für eine ausfallende Stunde eine Vertretungslehrkraft vor.

Filtert den Pool nach Fachqualifikation, Verfügbarkeit und bestehenden
Einsätzen, bewertet die Verbleibenden über einfache Schlüsselwörter und
begründet die Wahl. Die Bewertung ist regelbasiert (Schlüsselwörter im
Freitext preferences, Gewichte aus ScoringConfig).
"""

import datetime
import logging
from typing import Optional

from pydantic import BaseModel

from analysis.absence_expansion import AffectedLesson
from analysis.availability import is_available
from analysis.conflicts import is_already_scheduled
from config.schema import ScoringConfig
from models.school_class import SchoolClass
from models.substitution import SubstitutionRecord
from models.teacher import Teacher
from models.timeslot import TimeSlot, find_slot

logger = logging.getLogger(__name__)


class LessonDetails(BaseModel):
    """Die zu vertretende Stunde."""

    subject: str
    date: datetime.date
    time: str                 # Beginn des Slots, "HH:MM"

    @classmethod
    def from_affected(cls, lesson: AffectedLesson) -> "LessonDetails":
        return cls(subject=lesson.subject, date=lesson.date, time=lesson.time)


class SubstituteOption(BaseModel):
    """Ein wählbarer Kandidat mit Score (höher = besser)."""

    teacher_id: str
    name: str
    score: int


class SubstituteRecommendation(BaseModel):
    """Ergebnis der Suche. recommendation ist None, wenn niemand gefunden wurde."""

    recommendation: Optional[str] = None      # Name der empfohlenen Lehrkraft
    recommendation_id: Optional[str] = None
    reasoning: Optional[str] = None
    supervisory_only: bool = False            # Vertretung ohne Fachqualifikation
    substitute_options: list[SubstituteOption] = []

    @property
    def qualified_names(self) -> list[str]:
        """Rangliste der Namen, z.B. als Eingabe für einen externen Textgenerator."""
        if self.supervisory_only:
            return []
        return [o.name for o in self.substitute_options]


class SubstitutionFinder:
    """Findet passende Vertreter für ausfallende Stunden."""

    def __init__(self, scoring: Optional[ScoringConfig] = None) -> None:
        self.scoring = scoring or ScoringConfig()

    def find_substitute(
        self,
        lesson: LessonDetails,
        substitute_pool: list[Teacher],
        classes: list[SchoolClass],
        time_slots: list[TimeSlot],
    ) -> SubstituteRecommendation:
        """Empfiehlt eine Vertretung für eine Stunde.

        1. Pool aufteilen: fachlich qualifiziert / übrige.
        2. Niemand qualifiziert → erste freie Lehrkraft nur zur Aufsicht.
        3. Sonst: qualifizierte, freie Lehrkräfte bewerten; Gleichstand → Pool-Reihenfolge.

        Frei heißt: verfügbar, nicht anderweitig eingeplant, nicht selbst abwesend.
        """
        qualified = [t for t in substitute_pool if t.teaches(lesson.subject)]

        if not qualified:
            supervisors = [
                t for t in substitute_pool if self._is_free(t, lesson, classes, time_slots)
            ]
            if not supervisors:
                logger.info(
                    f"Keine Vertretung für {lesson.subject} am {lesson.date.isoformat()} "
                    f"{lesson.time}: weder Fachlehrkraft noch Aufsicht frei"
                )
                return SubstituteRecommendation(
                    reasoning=(
                        f"No teacher qualified in {lesson.subject} is available and no "
                        f"other teacher is free to supervise the class at {lesson.time}."
                    ),
                )
            best = supervisors[0]
            return SubstituteRecommendation(
                recommendation=best.name,
                recommendation_id=best.id,
                reasoning=(
                    f"Note: no free teacher is qualified in {lesson.subject}. "
                    f"{best.name} is suggested as a supervisory-only placement."
                ),
                supervisory_only=True,
                substitute_options=[
                    SubstituteOption(teacher_id=t.id, name=t.name, score=0)
                    for t in supervisors
                ],
            )

        candidates = [t for t in qualified if self._is_free(t, lesson, classes, time_slots)]
        if not candidates:
            logger.info(
                f"Keine freie Fachlehrkraft für {lesson.subject} am "
                f"{lesson.date.isoformat()} {lesson.time} ({len(qualified)} qualifiziert)"
            )
            return SubstituteRecommendation(
                reasoning=(
                    f"No qualified teacher is free to teach {lesson.subject} "
                    f"at {lesson.time}."
                ),
            )

        # sorted() ist stabil: Gleichstand behält die Pool-Reihenfolge
        scored = sorted(
            ((t, self._compute_score(t, lesson)) for t in candidates),
            key=lambda pair: pair[1],
            reverse=True,
        )
        best = scored[0][0]
        reasoning = (
            f"{best.name} is recommended: free at {lesson.time} and qualified "
            f"to teach {lesson.subject}."
        )
        if best.preferences:
            reasoning += f" Preferences: {best.preferences}."

        return SubstituteRecommendation(
            recommendation=best.name,
            recommendation_id=best.id,
            reasoning=reasoning,
            substitute_options=[
                SubstituteOption(teacher_id=t.id, name=t.name, score=score)
                for t, score in scored
            ],
        )

    def recommend_for_lessons(
        self,
        lessons: list[AffectedLesson],
        teachers: list[Teacher],
        classes: list[SchoolClass],
        time_slots: list[TimeSlot],
    ) -> list[tuple[AffectedLesson, SubstituteRecommendation]]:
        """Empfehlung für jede offene Stunde. Der Pool ist jeweils ohne die fehlende Lehrkraft."""
        results = []
        for lesson in lessons:
            if lesson.is_covered:
                continue
            pool = [t for t in teachers if t.id != lesson.absent_teacher_id]
            results.append((
                lesson,
                self.find_substitute(
                    LessonDetails.from_affected(lesson), pool, classes, time_slots
                ),
            ))
        return results

    # ── Hilfsfunktionen ───────────────────────────────────────────────────────

    def _is_free(
        self,
        teacher: Teacher,
        lesson: LessonDetails,
        classes: list[SchoolClass],
        time_slots: list[TimeSlot],
    ) -> bool:
        if not is_available(teacher, lesson.date, lesson.time, time_slots):
            return False
        if is_already_scheduled(teacher.id, lesson.date, lesson.time, classes):
            return False
        slot = find_slot(time_slots, lesson.time)
        return not teacher.is_absent_during(lesson.date, slot)

    # ── Score-Berechnung ──────────────────────────────────────────────────────

    def _compute_score(self, teacher: Teacher, lesson: LessonDetails) -> int:
        """Berechnet den Score eines Kandidaten.

        Zusammensetzung (Gewichte aus ScoringConfig):
        - Fachqualifikation: +10
        - Marker "senior classes" in preferences: +2
        - Marker "special education" in preferences UND Stunde ist Förderunterricht: +5
        """
        sc = self.scoring
        score = 0
        if teacher.teaches(lesson.subject):
            score += sc.weight_qualified
        if sc.senior_classes_marker in teacher.preferences:
            score += sc.weight_senior_classes
        if (sc.special_education_marker in teacher.preferences
                and lesson.subject == sc.special_education_subject):
            score += sc.weight_special_education
        return score


def find_substitute(
    lesson: LessonDetails,
    substitute_pool: list[Teacher],
    classes: list[SchoolClass],
    time_slots: list[TimeSlot],
    scoring: Optional[ScoringConfig] = None,
) -> SubstituteRecommendation:
    """Kurzform für SubstitutionFinder(scoring).find_substitute(...)."""
    return SubstitutionFinder(scoring).find_substitute(
        lesson, substitute_pool, classes, time_slots
    )


def build_substitution_record(
    lesson: AffectedLesson, substitute: Teacher
) -> SubstitutionRecord:
    """Erzeugt den Vertretungseintrag, wenn ein Vorschlag bestätigt wird."""
    return SubstitutionRecord(
        date=lesson.date,
        time=lesson.time,
        class_id=lesson.class_id,
        class_name=lesson.class_name,
        subject=lesson.subject,
        absent_teacher_id=lesson.absent_teacher_id,
        absent_teacher_name=lesson.absent_teacher_name,
        substitute_teacher_id=substitute.id,
        substitute_teacher_name=substitute.name,
    )
