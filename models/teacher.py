"""Datenmodell für eine Lehrkraft mit Verfügbarkeit, Wochenplan und Abwesenheiten (Pydantic v2)."""

import datetime
from datetime import date
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from models.school_class import (
    Lesson, WeeklySchedule, check_schedule_keys, lessons_at, normalize_schedule,
)
from models.timeslot import (
    DAY_END, DAY_START, WEEKDAYS, TimeSlot,
    as_calendar_day, interval_contains, intervals_overlap, is_valid_time, time_to_number,
)


def _new_id() -> str:
    return uuid4().hex[:12]


class AvailabilityWindow(BaseModel):
    """Zeitfenster, in dem eine Lehrkraft an der Schule ist (z.B. 08:00–13:00)."""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError(f"Ungültige Uhrzeit '{v}' (erwartet HH:MM)")
        return v

    def contains(self, slot: TimeSlot) -> bool:
        """True wenn der Slot vollständig im Fenster liegt (Teilüberlappung reicht nicht)."""
        return interval_contains(
            time_to_number(self.start), time_to_number(self.end),
            slot.start_number, slot.end_number,
        )


class DayAvailability(BaseModel):
    """Erklärte Verfügbarkeit an einem Wochentag."""

    day: str
    slots: list[AvailabilityWindow] = []

    @field_validator("day")
    @classmethod
    def _check_day(cls, v: str) -> str:
        if v not in WEEKDAYS:
            raise ValueError(f"Unbekannter Wochentag '{v}' (erlaubt: {', '.join(WEEKDAYS)})")
        return v

    def covers(self, slot: TimeSlot) -> bool:
        return any(window.contains(slot) for window in self.slots)


class AbsenceDay(BaseModel):
    """Abwesenheit an einem Kalendertag – ganztägig oder von start_time bis end_time."""

    id: str = Field(default_factory=_new_id)
    date: datetime.date
    is_all_day: bool = True
    start_time: Optional[str] = None   # ignoriert bei is_all_day
    end_time: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _to_calendar_day(cls, v):
        return as_calendar_day(v)

    @model_validator(mode="after")
    def _check_times(self):
        if self.is_all_day:
            return self
        for label, value in (("start_time", self.start_time), ("end_time", self.end_time)):
            if not is_valid_time(value):
                raise ValueError(
                    f"Teilweise Abwesenheit braucht {label} im Format HH:MM (erhalten: {value!r})"
                )
        if time_to_number(self.end_time) <= time_to_number(self.start_time):
            raise ValueError("Ende der Abwesenheit muss nach dem Beginn liegen.")
        return self

    @property
    def interval(self) -> tuple[float, float]:
        """Wirksames Intervall: [00:00, 24:00) bei ganztägig, sonst [start, end)."""
        if self.is_all_day:
            return DAY_START, DAY_END
        return time_to_number(self.start_time), time_to_number(self.end_time)

    def overlaps(self, slot: TimeSlot) -> bool:
        start, end = self.interval
        return intervals_overlap(slot.start_number, slot.end_number, start, end)

    def describe(self) -> str:
        if self.is_all_day:
            return f"{self.date.isoformat()} ganztägig"
        return f"{self.date.isoformat()} {self.start_time}–{self.end_time}"


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str
    name: str                                   # "Sarah Cohen"
    subjects: list[str] = []                    # Unterrichtbare Fächer
    availability: list[DayAvailability] = []    # Wann die Lehrkraft unterrichten KÖNNTE
    preferences: str = ""                       # Freitext, z.B. "senior classes"
    schedule: WeeklySchedule = {}               # Verbindlich eingeplante Stunden
    absences: list[AbsenceDay] = []

    @field_validator("preferences", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return v or ""

    @field_validator("schedule", mode="before")
    @classmethod
    def _normalize_schedule(cls, v):
        return normalize_schedule(v)

    @field_validator("schedule")
    @classmethod
    def _check_schedule(cls, v: WeeklySchedule) -> WeeklySchedule:
        return check_schedule_keys(v)

    def teaches(self, subject: str) -> bool:
        return subject in self.subjects

    def availability_for(self, weekday: Optional[str]) -> Optional[DayAvailability]:
        return next((a for a in self.availability if a.day == weekday), None)

    def lessons_at(self, weekday: Optional[str], time: str) -> list[Lesson]:
        return lessons_at(self.schedule, weekday, time)

    def absences_on(self, day: date) -> list[AbsenceDay]:
        """Abwesenheiten an genau diesem Kalendertag."""
        return [a for a in self.absences if a.date == day]

    def is_absent_during(self, day: date, slot: TimeSlot) -> bool:
        """True wenn eine Abwesenheit an diesem Tag den Slot überlappt."""
        return any(a.overlaps(slot) for a in self.absences_on(day))

    @property
    def weekly_lesson_count(self) -> int:
        return sum(len(lessons) for slots in self.schedule.values()
                   for lessons in slots.values())
