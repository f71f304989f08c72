"""Gemeinsame Hilfsfunktionen für Excel-Export und Terminal-Ausgabe."""

from datetime import date

from analysis.absence_expansion import AffectedLesson
from models.timeslot import weekday_name

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "uncovered":   "FFCCCC",
    "covered":     "CCFFCC",
    "supervisory": "FFF2B3",
    "free":        "F5F5F5",
    "header":      "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def format_day(day: date) -> str:
    """'Monday 03.06.2024' – Samstag ohne Wochentagsnamen."""
    name = weekday_name(day)
    label = day.strftime("%d.%m.%Y")
    return f"{name} {label}" if name else label


def lesson_label(lesson: AffectedLesson) -> str:
    """Kurzbezeichnung einer betroffenen Stunde für Tabellen und Logs."""
    return f"{lesson.time} {lesson.class_name} {lesson.subject} ({lesson.absent_teacher_name})"
