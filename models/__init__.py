from models.timeslot import TimeSlot, SlotType, TimeFormatError, WEEKDAYS
from models.school_class import Lesson, SchoolClass
from models.teacher import Teacher, AbsenceDay, DayAvailability, AvailabilityWindow
from models.substitution import SubstitutionRecord
from models.school_data import SchoolData, ConsistencyReport

__all__ = [
    "TimeSlot",
    "SlotType",
    "TimeFormatError",
    "WEEKDAYS",
    "Lesson",
    "SchoolClass",
    "Teacher",
    "AbsenceDay",
    "DayAvailability",
    "AvailabilityWindow",
    "SubstitutionRecord",
    "SchoolData",
    "ConsistencyReport",
]
