"""Abwesenheits-Auflösung: Welche eingeplanten Stunden fallen durch Abwesenheiten aus?

Ergebnisse werden nie gespeichert – sie veralten, sobald sich Abwesenheiten,
Stundenpläne oder Vertretungen ändern, und werden bei jedem Aufruf neu berechnet.
"""

import datetime
import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from pydantic import BaseModel, model_validator

from analysis.coverage import is_covered
from models.school_class import SchoolClass
from models.substitution import SubstitutionRecord
from models.teacher import Teacher
from models.timeslot import TimeSlot, find_slot, weekday_name, week_start

logger = logging.getLogger(__name__)


class DateRange(BaseModel):
    """Geschlossener Datumsbereich [start, end]."""

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self):
        if self.end < self.start:
            raise ValueError(
                f"Ende ({self.end.isoformat()}) liegt vor Beginn ({self.start.isoformat()})"
            )
        return self

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(start=day, end=day)

    @classmethod
    def week_of(cls, day: date) -> "DateRange":
        """Schulwoche (Sonntag bis Samstag), in der day liegt."""
        first = week_start(day)
        return cls(start=first, end=first + timedelta(days=6))


class AffectedLesson(BaseModel):
    """Eine Stunde, deren Lehrkraft zu dieser Zeit abwesend ist (abgeleitet, nie gespeichert)."""

    subject: str
    teacher_id: str
    class_id: str
    major_id: Optional[str] = None
    date: datetime.date
    time: str                      # Beginn des Slots
    class_name: str
    absent_teacher_id: str
    absent_teacher_name: str
    is_covered: bool


def expand_affected_lessons(
    teachers: list[Teacher],
    classes: list[SchoolClass],
    substitutions: list[SubstitutionRecord],
    time_slots: list[TimeSlot],
    date_range: DateRange,
) -> list[AffectedLesson]:
    """Löst Abwesenheiten im Datumsbereich in betroffene Stunden auf.

    Pro Tag und Lehrkraft mit Abwesenheit an diesem Kalendertag wird jede
    Stunde aus teacher.schedule[Wochentag] gegen die Abwesenheiten geprüft
    (halboffene Überlappung). Stunden in unbekannten Slots oder Pausen und
    Stunden verschwundener Klassen werden übersprungen.

    Ergebnis sortiert nach (Datum, Uhrzeit, Klasse).
    """
    classes_by_id = {c.id: c for c in classes}
    affected: list[AffectedLesson] = []

    for day in date_range.days():
        weekday = weekday_name(day)
        for teacher in teachers:
            day_absences = teacher.absences_on(day)
            if not day_absences:
                continue

            for time, lessons in teacher.schedule.get(weekday, {}).items():
                slot = find_slot(time_slots, time)
                if slot is None:
                    logger.debug(
                        f"{teacher.name}: {weekday} {time} ohne Unterrichts-Slot – übersprungen"
                    )
                    continue
                if not any(a.overlaps(slot) for a in day_absences):
                    continue

                for lesson in lessons:
                    school_class = classes_by_id.get(lesson.class_id)
                    if school_class is None:
                        logger.debug(
                            f"{teacher.name}: {weekday} {time} verweist auf unbekannte "
                            f"Klasse '{lesson.class_id}' – übersprungen"
                        )
                        continue
                    affected.append(AffectedLesson(
                        subject=lesson.subject,
                        teacher_id=lesson.teacher_id,
                        class_id=school_class.id,
                        major_id=lesson.major_id,
                        date=day,
                        time=time,
                        class_name=school_class.name,
                        absent_teacher_id=teacher.id,
                        absent_teacher_name=teacher.name,
                        is_covered=is_covered(
                            substitutions, teachers, day, slot, school_class.id
                        ),
                    ))

    affected.sort(key=lambda a: (a.date, a.time, a.class_id))
    logger.info(
        f"{len(affected)} betroffene Stunden zwischen {date_range.start.isoformat()} "
        f"und {date_range.end.isoformat()} "
        f"({sum(1 for a in affected if not a.is_covered)} offen)"
    )
    return affected


def needed_substitutes(affected: list[AffectedLesson]) -> dict[date, list[AffectedLesson]]:
    """Offene (nicht abgedeckte) Stunden, gruppiert nach Datum in aufsteigender Reihenfolge."""
    grouped: dict[date, list[AffectedLesson]] = {}
    uncovered = sorted(
        (a for a in affected if not a.is_covered),
        key=lambda a: (a.date, a.time, a.class_id),
    )
    for lesson in uncovered:
        grouped.setdefault(lesson.date, []).append(lesson)
    return grouped
