"""Verfügbarkeit: Deckt die erklärte Wochen-Verfügbarkeit einer Lehrkraft einen Slot ab?

Verfügbarkeit ist NICHT der Stundenplan: eine Lehrkraft kann verfügbar, aber
nicht eingeplant sein – oder (laut Daten) außerhalb ihrer Verfügbarkeit
eingeplant. Hier wird nur die Erklärung geprüft.
"""

from datetime import date, datetime, timedelta
from enum import Enum

from models.teacher import Teacher
from models.timeslot import TimeSlot, find_slot, slot_at, weekday_name, WEEKDAYS


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"          # anwesend, nicht abwesend, unterrichtet nicht
    TEACHING = "teaching"            # unterrichtet gerade
    ABSENT = "absent"                # als abwesend gemeldet
    NOT_IN_SCHOOL = "not_in_school"  # außerhalb der erklärten Verfügbarkeit
    UNKNOWN = "unknown"              # Zeitpunkt liegt in keiner Unterrichtsstunde


def is_available(teacher: Teacher, day: date, time: str, time_slots: list[TimeSlot]) -> bool:
    """True wenn die Verfügbarkeit der Lehrkraft den Slot `time` an `day` vollständig abdeckt.

    Unbekannter Slot, fehlende Tagesverfügbarkeit oder nur teilweise
    Überdeckung ergeben False.
    """
    slot = find_slot(time_slots, time)
    if slot is None:
        return False
    day_availability = teacher.availability_for(weekday_name(day))
    if day_availability is None:
        return False
    return day_availability.covers(slot)


def availability_status(
    teacher: Teacher, moment: datetime, time_slots: list[TimeSlot]
) -> AvailabilityStatus:
    """Status einer Lehrkraft zu einem Zeitpunkt.

    Reihenfolge: abwesend → nicht in der Schule → unterrichtet → verfügbar.
    Liegt der Zeitpunkt in keiner Unterrichtsstunde, ist der Status unbekannt.
    """
    slot = slot_at(time_slots, moment.strftime("%H:%M"))
    if slot is None:
        return AvailabilityStatus.UNKNOWN

    day = moment.date()
    if teacher.is_absent_during(day, slot):
        return AvailabilityStatus.ABSENT

    weekday = weekday_name(day)
    day_availability = teacher.availability_for(weekday)
    if day_availability is None or not day_availability.covers(slot):
        return AvailabilityStatus.NOT_IN_SCHOOL

    if teacher.lessons_at(weekday, slot.start):
        return AvailabilityStatus.TEACHING

    return AvailabilityStatus.AVAILABLE


def free_teachers_board(
    teachers: list[Teacher], first_day: date, time_slots: list[TimeSlot]
) -> dict[str, dict[str, list[str]]]:
    """Übersicht freier Lehrkräfte einer Woche.

    Für jeden Unterrichtstag ab first_day (Sonntag) und jede Unterrichtsstunde:
    Namen aller Lehrkräfte, die laut Verfügbarkeit anwesend sind, nicht
    unterrichten und nicht abwesend sind.
    """
    lesson_slots = [s for s in time_slots if s.is_lesson]
    board: dict[str, dict[str, list[str]]] = {
        day: {slot.start: [] for slot in lesson_slots} for day in WEEKDAYS
    }
    for offset, weekday in enumerate(WEEKDAYS):
        current = first_day + timedelta(days=offset)
        for teacher in teachers:
            day_availability = teacher.availability_for(weekday)
            if day_availability is None:
                continue
            for slot in lesson_slots:
                if not day_availability.covers(slot):
                    continue
                if teacher.lessons_at(weekday, slot.start):
                    continue
                if teacher.is_absent_during(current, slot):
                    continue
                board[weekday][slot.start].append(teacher.name)
    return board
