"""Testdaten-Generator für den Vertretungsplaner.

Erzeugt einen konsistenten Demo-Datensatz: feste Lehrkräfte mit
Verfügbarkeit und Präferenzen, drei Klassen mit zufällig (aber
reproduzierbar über seed) belegten Wochenplänen und einige Abwesenheiten
in der Woche des Bezugstags.

Absichtliche Engpässe:
  1. David Levi ist sonntags nicht in der Schule.
  2. Tamar Shapiro ist Teilzeit (So–Di, nur bis 10:30).
  3. Major-Schiene: Klassen 11-2 und 12-1 haben montags 11:15 gemeinsam
     Physik/Chemie bei zwei Lehrkräften.
  4. Abwesenheiten: Sarah Cohen ganztägig am Montag, Rachel Mizrahi
     dienstags ab 09:45. Dadurch entstehen offene Vertretungen.
"""

import random
from datetime import date, timedelta
from typing import Optional

from config.defaults import default_time_slots
from config.schema import EngineConfig
from models.school_class import Lesson, SchoolClass
from models.school_data import SchoolData
from models.teacher import AbsenceDay, AvailabilityWindow, DayAvailability, Teacher
from models.timeslot import WEEKDAYS, TimeSlot, week_start

# ─── Feste Lehrkräfte ─────────────────────────────────────────────────────────
# (id, Name, Fächer, Präferenzen, Verfügbarkeit: Wochentag → (von, bis))

_FULL_WEEK = {day: ("08:00", "12:00") for day in WEEKDAYS[:5]}
_FULL_WEEK["Friday"] = ("08:00", "10:30")

_TEACHERS: list[tuple[str, str, list[str], str, dict[str, tuple[str, str]]]] = [
    ("t1", "Sarah Cohen", ["Mathematics", "Physics"],
     "Morning classes, senior classes", _FULL_WEEK),
    ("t2", "David Levi", ["History", "Bible"],
     "No Sundays", {d: w for d, w in _FULL_WEEK.items() if d != "Sunday"}),
    ("t3", "Rachel Mizrahi", ["English", "Literature"],
     "special education", _FULL_WEEK),
    ("t4", "Yossi Ben-Ari", ["Sports", "Biology"],
     "Gym access", _FULL_WEEK),
    ("t5", "Michal Golan", ["Art", "Chemistry"],
     "", _FULL_WEEK),
    ("t6", "Noa Peretz", ["special education", "English"],
     "special education, senior classes", _FULL_WEEK),
    ("t7", "Avi Friedman", ["Mathematics", "Chemistry"],
     "senior classes", _FULL_WEEK),
    ("t8", "Tamar Shapiro", ["Literature", "History"],
     "Part time", {d: ("08:00", "10:30") for d in ("Sunday", "Monday", "Tuesday")}),
]

# ─── Klassen und Fächer (Wochenstunden-Richtwert) ─────────────────────────────

_CLASSES: list[tuple[str, str]] = [
    ("c10-1", "Grade 10-1"),
    ("c11-2", "Grade 11-2"),
    ("c12-1", "Grade 12-1"),
]

_CURRICULUM: dict[str, int] = {
    "Mathematics": 5, "English": 4, "History": 3, "Literature": 3,
    "Physics": 2, "Biology": 2, "Chemistry": 2, "Bible": 2,
    "Sports": 2, "Art": 1, "special education": 1,
}

# Major-Schiene: (Wochentag, Beginn, Klassen, [(Fach, Lehrkraft)])
_MAJOR = ("Monday", "11:15", ["c11-2", "c12-1"], [("Physics", "t1"), ("Chemistry", "t7")])
_MAJOR_ID = "major-science"


def _is_present(teacher: Teacher, day: str, slot: TimeSlot) -> bool:
    availability = teacher.availability_for(day)
    return availability is not None and availability.covers(slot)


class FakeDataGenerator:
    """Generiert einen vollständigen, konsistenten Demo-Datensatz."""

    def __init__(self, config: Optional[EngineConfig] = None, seed: Optional[int] = None) -> None:
        self.config = config or EngineConfig()
        self.rng = random.Random(seed)

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _generate_teachers(self) -> list[Teacher]:
        teachers = []
        for teacher_id, name, subjects, preferences, windows in _TEACHERS:
            teachers.append(Teacher(
                id=teacher_id,
                name=name,
                subjects=subjects,
                preferences=preferences,
                availability=[
                    DayAvailability(day=day, slots=[AvailabilityWindow(start=s, end=e)])
                    for day, (s, e) in windows.items()
                ],
            ))
        return teachers

    # ─── Stundenpläne ─────────────────────────────────────────────────────────

    def _fill_schedules(
        self,
        teachers: list[Teacher],
        time_slots: list[TimeSlot],
    ) -> tuple[list[SchoolClass], list[Teacher]]:
        """Belegt die Klassenpläne und spiegelt sie in die Lehrerpläne.

        Pro Klasse und Unterrichtsstunde wird ein Fach gewählt, dessen
        Restkontingent noch offen ist und für das eine Lehrkraft frei und
        verfügbar ist. Bleibt nichts übrig, bleibt der Slot frei.
        """
        lesson_slots = [s for s in time_slots if s.is_lesson]
        class_schedules: dict[str, dict[str, dict[str, list[Lesson]]]] = {
            class_id: {} for class_id, _ in _CLASSES
        }
        teacher_schedules: dict[str, dict[str, dict[str, list[Lesson]]]] = {
            t.id: {} for t in teachers
        }
        remaining = {class_id: dict(_CURRICULUM) for class_id, _ in _CLASSES}

        def book(lesson: Lesson, day: str, time: str) -> None:
            class_schedules[lesson.class_id].setdefault(day, {}).setdefault(time, []).append(lesson)
            teacher_schedules[lesson.teacher_id].setdefault(day, {}).setdefault(time, []).append(lesson)

        major_day, major_time, major_classes, major_lessons = _MAJOR
        for class_id in major_classes:
            for subject, teacher_id in major_lessons:
                book(Lesson(subject=subject, teacher_id=teacher_id,
                            class_id=class_id, major_id=_MAJOR_ID),
                     major_day, major_time)

        for day in WEEKDAYS:
            for slot in lesson_slots:
                busy = {tid for tid, sched in teacher_schedules.items()
                        if sched.get(day, {}).get(slot.start)}
                for class_id, _ in _CLASSES:
                    if class_schedules[class_id].get(day, {}).get(slot.start):
                        continue
                    options = [
                        (subject, t)
                        for subject, left in remaining[class_id].items() if left > 0
                        for t in teachers
                        if t.teaches(subject) and t.id not in busy
                        and _is_present(t, day, slot)
                    ]
                    if not options:
                        continue
                    subject, teacher = self.rng.choice(options)
                    book(Lesson(subject=subject, teacher_id=teacher.id, class_id=class_id),
                         day, slot.start)
                    remaining[class_id][subject] -= 1
                    busy.add(teacher.id)

        classes = [
            SchoolClass(id=class_id, name=name, schedule=class_schedules[class_id])
            for class_id, name in _CLASSES
        ]
        teachers = [
            t.model_copy(update={"schedule": teacher_schedules[t.id]}) for t in teachers
        ]
        return classes, teachers

    # ─── Abwesenheiten ────────────────────────────────────────────────────────

    def _add_absences(self, teachers: list[Teacher], first_day: date) -> list[Teacher]:
        """Sarah Cohen fehlt Montag ganztägig, Rachel Mizrahi Dienstag ab 09:45."""
        planned = {
            "t1": [AbsenceDay(date=first_day + timedelta(days=1))],
            "t3": [AbsenceDay(date=first_day + timedelta(days=2), is_all_day=False,
                              start_time="09:45", end_time="12:00")],
        }
        return [
            t.model_copy(update={"absences": planned[t.id]}) if t.id in planned else t
            for t in teachers
        ]

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self, reference_day: Optional[date] = None) -> SchoolData:
        """Erzeugt den Datensatz; Abwesenheiten liegen in der Woche von reference_day."""
        first_day = week_start(reference_day or date.today())
        time_slots = default_time_slots()
        teachers = self._generate_teachers()
        classes, teachers = self._fill_schedules(teachers, time_slots)
        teachers = self._add_absences(teachers, first_day)
        return SchoolData(time_slots=time_slots, teachers=teachers, classes=classes)

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: SchoolData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        lessons = sum(c.lesson_count for c in data.classes)
        absences = [a for t in data.teachers for a in t.absences]
        table.add_row("Zeitslots", str(len(data.time_slots)),
                      f"{len(data.lesson_slots)} Unterrichtsstunden")
        table.add_row("Lehrkräfte", str(len(data.teachers)), "")
        table.add_row("Klassen", str(len(data.classes)), f"{lessons} Stunden/Woche")
        table.add_row("Abwesenheiten", str(len(absences)),
                      ", ".join(a.describe() for a in absences))

        console.print(table)
