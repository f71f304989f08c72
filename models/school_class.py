"""Datenmodell für Schulklassen, Unterrichtsstunden und Wochenpläne (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator

from models.timeslot import WEEKDAYS, is_valid_time


class Lesson(BaseModel):
    """Eine eingeplante Unterrichtsstunde (Fach, Lehrkraft, Klasse)."""

    subject: str
    teacher_id: str
    class_id: str
    major_id: Optional[str] = None   # gesetzt = klassenübergreifende Schiene ("Major")

    @property
    def is_major(self) -> bool:
        """Major-Stunden werden nicht einzeln pro Slot bearbeitet."""
        return self.major_id is not None


# Wochenplan: Wochentag → Beginn ("HH:MM") → Stunden in diesem Slot
WeeklySchedule = dict[str, dict[str, list[Lesson]]]


def normalize_schedule(value):
    """Vereinheitlicht Slot-Einträge auf Listen.

    Ältere Datensätze speichern pro Slot eine einzelne Stunde oder null
    statt einer Liste.
    """
    if not isinstance(value, dict):
        return value
    normalized = {}
    for day, slots in value.items():
        if not isinstance(slots, dict):
            normalized[day] = slots
            continue
        day_slots = {}
        for time, lessons in slots.items():
            if lessons is None:
                lessons = []
            elif not isinstance(lessons, list):
                lessons = [lessons]
            day_slots[time] = lessons
        normalized[day] = day_slots
    return normalized


def check_schedule_keys(schedule: WeeklySchedule) -> WeeklySchedule:
    """Wochentage müssen aus der Wochentagstabelle stammen, Zeiten im Format HH:MM sein."""
    for day, slots in schedule.items():
        if day not in WEEKDAYS:
            raise ValueError(
                f"Unbekannter Wochentag '{day}' im Stundenplan (erlaubt: {', '.join(WEEKDAYS)})"
            )
        for time in slots:
            if not is_valid_time(time):
                raise ValueError(f"Ungültige Uhrzeit '{time}' im Stundenplan ({day})")
    return schedule


def lessons_at(schedule: WeeklySchedule, weekday: Optional[str], time: str) -> list[Lesson]:
    """Alle Stunden eines Plans in genau diesem Slot (leer wenn keine)."""
    if weekday is None:
        return []
    return schedule.get(weekday, {}).get(time, [])


class SchoolClass(BaseModel):
    """Repräsentiert eine Klasse mit eigenem Wochenplan (z.B. "10-1")."""

    id: str
    name: str
    schedule: WeeklySchedule = {}

    @field_validator("schedule", mode="before")
    @classmethod
    def _normalize_schedule(cls, v):
        return normalize_schedule(v)

    @field_validator("schedule")
    @classmethod
    def _check_schedule(cls, v: WeeklySchedule) -> WeeklySchedule:
        return check_schedule_keys(v)

    def lessons_at(self, weekday: Optional[str], time: str) -> list[Lesson]:
        return lessons_at(self.schedule, weekday, time)

    @property
    def lesson_count(self) -> int:
        """Anzahl eingeplanter Stunden pro Woche."""
        return sum(len(lessons) for slots in self.schedule.values()
                   for lessons in slots.values())
