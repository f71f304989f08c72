"""Abdeckung: Hat eine betroffene Stunde eine (noch gültige) Vertretung?"""

import logging
from datetime import date
from typing import Optional

from models.substitution import SubstitutionRecord
from models.teacher import Teacher
from models.timeslot import TimeSlot

logger = logging.getLogger(__name__)


def find_substitution(
    substitutions: list[SubstitutionRecord], day: date, time: str, class_id: str
) -> Optional[SubstitutionRecord]:
    """Erste Vertretung für genau diese Stunde (Tag, Slot-Beginn, Klasse)."""
    return next((s for s in substitutions if s.matches(day, time, class_id)), None)


def is_covered(
    substitutions: list[SubstitutionRecord],
    teachers: list[Teacher],
    day: date,
    slot: TimeSlot,
    class_id: str,
) -> bool:
    """True wenn eine Vertretung existiert und der Vertreter selbst nicht abwesend ist.

    Ist der eingetragene Vertreter an diesem Tag im selben Slot ebenfalls
    abwesend, gilt die Stunde wieder als offen.
    """
    record = find_substitution(substitutions, day, slot.start, class_id)
    if record is None:
        return False

    substitute = next((t for t in teachers if t.id == record.substitute_teacher_id), None)
    if substitute is not None and substitute.is_absent_during(day, slot):
        logger.info(
            f"Vertretung {record.id} ungültig: {record.substitute_teacher_name} ist "
            f"am {day.isoformat()} um {slot.start} selbst abwesend"
        )
        return False
    return True
