"""Zeitmodell: Zeitslots im Tagesraster und Intervall-Arithmetik auf "HH:MM"-Uhrzeiten.

Alle Vergleiche laufen über Stunden als Fließkommazahl ("08:30" → 8.5).
Überlappung ist halboffen: [start, end) – eine Stunde, die genau endet,
wenn eine andere beginnt, überlappt NICHT.
"""

import logging
import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^(0[0-9]|1[0-9]|2[0-3]):[0-5][0-9]$")

# Unterrichtstage. Index = Wochentag mit Sonntag=0; Samstag (6) hat keinen Eintrag.
WEEKDAYS: tuple[str, ...] = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday",
)

# Ganztägige Abwesenheit: [00:00, 24:00)
DAY_START = 0.0
DAY_END = 24.0


class TimeFormatError(ValueError):
    """Uhrzeit entspricht nicht dem Format HH:MM."""


def is_valid_time(value) -> bool:
    """True wenn value eine Uhrzeit im Format HH:MM (00:00–23:59) ist."""
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def time_to_number(hhmm: str, strict: bool = False) -> float:
    """Wandelt "HH:MM" in Stunden um (z.B. "08:45" → 8.75).

    Ungültige Eingaben werden als Mitternacht (0.0) gewertet. Mit
    strict=True wird stattdessen TimeFormatError ausgelöst.
    """
    if not is_valid_time(hhmm):
        if strict:
            raise TimeFormatError(f"Ungültige Uhrzeit '{hhmm}' (erwartet HH:MM)")
        logger.debug(f"Ungültige Uhrzeit {hhmm!r} – wird als 00:00 gewertet")
        return 0.0
    hours, minutes = hhmm.split(":")
    return int(hours) + int(minutes) / 60


def intervals_overlap(
    start_a: float, end_a: float, start_b: float, end_b: float
) -> bool:
    """Halboffene Überlappung: [start_a, end_a) ∩ [start_b, end_b) ≠ ∅."""
    return start_a < end_b and end_a > start_b


def interval_contains(
    outer_start: float, outer_end: float, inner_start: float, inner_end: float
) -> bool:
    """True wenn [inner_start, inner_end) vollständig in [outer_start, outer_end) liegt."""
    return inner_start >= outer_start and inner_end <= outer_end


def weekday_name(day: date) -> Optional[str]:
    """Name des Unterrichtstags für ein Datum; None für Samstag."""
    index = (day.weekday() + 1) % 7   # date.weekday(): Mo=0 → Umrechnung auf So=0
    return WEEKDAYS[index] if index < len(WEEKDAYS) else None


def as_calendar_day(value):
    """Normalisiert Datumsangaben auf den Kalendertag.

    Akzeptiert date, datetime und ISO-Strings mit oder ohne Uhrzeit
    ("2024-06-02", "2024-06-02T00:00:00"). Andere Werte werden unverändert
    an Pydantic weitergereicht.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


def week_start(day: date) -> date:
    """Sonntag der Woche (Sonntag bis Samstag), in der day liegt."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


class SlotType(str, Enum):
    LESSON = "lesson"
    BREAK = "break"


class TimeSlot(BaseModel):
    """Ein Zeitslot im Tagesraster (Unterrichtsstunde oder Pause)."""

    id: str
    start: str                          # "08:00"
    end: str                            # "08:45"
    type: SlotType = SlotType.LESSON

    @field_validator("start", "end")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError(f"Ungültige Uhrzeit '{v}' (erwartet HH:MM)")
        return v

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_number <= self.start_number:
            raise ValueError(
                f"Zeitslot {self.id}: Ende ({self.end}) muss nach Beginn ({self.start}) liegen"
            )
        return self

    @property
    def start_number(self) -> float:
        return time_to_number(self.start)

    @property
    def end_number(self) -> float:
        return time_to_number(self.end)

    @property
    def is_lesson(self) -> bool:
        return self.type == SlotType.LESSON

    def overlaps(self, start: float, end: float) -> bool:
        """Halboffene Überlappung dieses Slots mit [start, end)."""
        return intervals_overlap(self.start_number, self.end_number, start, end)

    def __str__(self) -> str:
        return f"{self.start}–{self.end}"


def find_slot(
    time_slots: list[TimeSlot], time: str, lessons_only: bool = True
) -> Optional[TimeSlot]:
    """Sucht den Slot, der um `time` beginnt. Pausen zählen nur mit lessons_only=False."""
    for slot in time_slots:
        if slot.start == time and (slot.is_lesson or not lessons_only):
            return slot
    return None


def slot_at(time_slots: list[TimeSlot], time: str) -> Optional[TimeSlot]:
    """Sucht die Unterrichtsstunde, in die der Zeitpunkt `time` fällt."""
    t = time_to_number(time)
    for slot in time_slots:
        if slot.is_lesson and slot.start_number <= t < slot.end_number:
            return slot
    return None


def check_time_grid(time_slots: list[TimeSlot]) -> list[str]:
    """Prüft das Tagesraster: eindeutige IDs, aufsteigend sortiert, überschneidungsfrei."""
    problems: list[str] = []
    seen_ids: set[str] = set()
    for slot in time_slots:
        if slot.id in seen_ids:
            problems.append(f"Zeitslot-ID '{slot.id}' ist doppelt vergeben.")
        seen_ids.add(slot.id)

    for prev, cur in zip(time_slots, time_slots[1:]):
        if cur.start_number < prev.start_number:
            problems.append(
                f"Zeitslots nicht aufsteigend sortiert: {prev} vor {cur}."
            )
        elif cur.overlaps(prev.start_number, prev.end_number):
            problems.append(f"Zeitslots überschneiden sich: {prev} und {cur}.")
    return problems
