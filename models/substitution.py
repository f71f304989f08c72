"""Datenmodell für eine bestätigte Vertretung (Pydantic v2)."""

import datetime
from datetime import date
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from models.timeslot import as_calendar_day, is_valid_time


class SubstitutionRecord(BaseModel):
    """Eine bestätigte Vertretung für genau eine Stunde einer Klasse.

    Entsteht, wenn eine Person einen vorgeschlagenen Vertreter bestätigt.
    Gilt als Abdeckung, solange der Vertreter selbst nicht abwesend ist.
    """

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    date: datetime.date
    time: str                        # Beginn des Slots, "HH:MM"
    class_id: str
    class_name: str = ""
    subject: str
    absent_teacher_id: str
    absent_teacher_name: str
    substitute_teacher_id: str
    substitute_teacher_name: str
    created_at: Optional[datetime.datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def _to_calendar_day(cls, v):
        return as_calendar_day(v)

    @field_validator("time")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError(f"Ungültige Uhrzeit '{v}' (erwartet HH:MM)")
        return v

    def matches(self, day: date, time: str, class_id: str) -> bool:
        """True wenn die Vertretung genau diese Stunde (Tag, Slot, Klasse) betrifft."""
        return self.date == day and self.time == time and self.class_id == class_id
