"""Konflikt-Prüfung: Ist eine Lehrkraft zu einem Slot bereits in einer Klasse eingeplant?"""

from datetime import date
from typing import Optional

from analysis.availability import is_available
from models.school_class import SchoolClass
from models.teacher import Teacher
from models.timeslot import TimeSlot, weekday_name


def is_already_scheduled(
    teacher_id: str,
    day: date,
    time: str,
    classes: list[SchoolClass],
    ignore_class_id: Optional[str] = None,
) -> bool:
    """True wenn eine Klasse zu (Wochentag von day, time) eine Stunde dieser Lehrkraft hat.

    Geprüft wird nur der Slot-Schlüssel `time` selbst, nicht Teilüberlappungen –
    Stunden liegen immer auf Slot-Grenzen. ignore_class_id blendet die gerade
    bearbeitete Klasse aus.
    """
    weekday = weekday_name(day)
    for school_class in classes:
        if school_class.id == ignore_class_id:
            continue
        if any(l.teacher_id == teacher_id for l in school_class.lessons_at(weekday, time)):
            return True
    return False


class MajorLessonError(ValueError):
    """Stunde gehört zu einer Major-Schiene und ist nicht einzeln bearbeitbar."""


def slot_candidates(
    school_class: SchoolClass,
    day: date,
    time: str,
    teachers: list[Teacher],
    classes: list[SchoolClass],
    time_slots: list[TimeSlot],
    subject: Optional[str] = None,
) -> list[Teacher]:
    """Lehrkräfte, die beim Bearbeiten eines Klassen-Slots wählbar sind.

    Wählbar: verfügbar und nicht anderweitig eingeplant – oder bereits die
    Lehrkraft dieses Slots. Mit subject nur Lehrkräfte dieses Fachs.
    Slots mit Major-Stunden werden nicht einzeln bearbeitet.
    """
    current = school_class.lessons_at(weekday_name(day), time)
    if any(l.is_major for l in current):
        raise MajorLessonError(
            f"Klasse {school_class.name}, {time}: Stunde gehört zu einer Major-Schiene "
            f"und wird über die Schiene bearbeitet."
        )
    current_ids = {l.teacher_id for l in current}

    candidates = []
    for teacher in teachers:
        free = (
            is_available(teacher, day, time, time_slots)
            and not is_already_scheduled(teacher.id, day, time, classes,
                                         ignore_class_id=school_class.id)
        )
        if not (free or teacher.id in current_ids):
            continue
        if subject and not teacher.teaches(subject):
            continue
        candidates.append(teacher)
    return candidates
