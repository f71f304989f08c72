"""Tests für Verfügbarkeit, Konflikte, Abwesenheits-Auflösung, Abdeckung und Vertretungsvorschläge."""

import random
from datetime import date, datetime

import pytest

from analysis.absence_expansion import DateRange, expand_affected_lessons, needed_substitutes
from analysis.availability import (
    AvailabilityStatus, availability_status, free_teachers_board, is_available,
)
from analysis.conflicts import MajorLessonError, is_already_scheduled, slot_candidates
from analysis.coverage import find_substitution, is_covered
from analysis.substitution_helper import (
    LessonDetails, SubstitutionFinder, build_substitution_record, find_substitute,
)
from config.defaults import default_time_slots
from config.schema import ScoringConfig
from models.school_class import Lesson, SchoolClass
from models.substitution import SubstitutionRecord
from models.teacher import AbsenceDay, AvailabilityWindow, DayAvailability, Teacher
from models.timeslot import WEEKDAYS, TimeSlot, find_slot

SUNDAY = date(2024, 6, 2)
MONDAY = date(2024, 6, 3)
SATURDAY = date(2024, 6, 8)


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_teacher(
    teacher_id: str,
    name: str,
    subjects: list[str],
    days=WEEKDAYS,
    window: tuple[str, str] = ("08:00", "12:00"),
    preferences: str = "",
    schedule=None,
    absences=None,
) -> Teacher:
    return Teacher(
        id=teacher_id,
        name=name,
        subjects=subjects,
        preferences=preferences,
        availability=[
            DayAvailability(day=d, slots=[AvailabilityWindow(start=window[0], end=window[1])])
            for d in days
        ],
        schedule=schedule or {},
        absences=absences or [],
    )


def _lesson(subject: str, teacher_id: str, class_id: str, major_id=None) -> Lesson:
    return Lesson(subject=subject, teacher_id=teacher_id, class_id=class_id, major_id=major_id)


def _make_world(sarah_absences=None, extra_teachers=None):
    """Sarah Cohen unterrichtet sonntags 08:00 Mathe und 09:45 Physik in 10-1.

    Avi Friedman unterrichtet sonntags 08:00 Mathe in 11-2.
    """
    math_10 = _lesson("Mathematics", "t1", "c10-1")
    physics_10 = _lesson("Physics", "t1", "c10-1")
    math_11 = _lesson("Mathematics", "t7", "c11-2")

    sarah = _make_teacher(
        "t1", "Sarah Cohen", ["Mathematics", "Physics"],
        preferences="Morning classes",
        schedule={"Sunday": {"08:00": [math_10], "09:45": [physics_10]}},
        absences=sarah_absences,
    )
    avi = _make_teacher(
        "t7", "Avi Friedman", ["Mathematics", "Chemistry"],
        schedule={"Sunday": {"08:00": [math_11]}},
    )
    rachel = _make_teacher("t3", "Rachel Mizrahi", ["English", "Literature"])
    david = _make_teacher(
        "t2", "David Levi", ["History", "Bible"],
        days=[d for d in WEEKDAYS if d != "Sunday"], preferences="No Sundays",
    )
    teachers = [sarah, avi, rachel, david] + (extra_teachers or [])
    classes = [
        SchoolClass(id="c10-1", name="Grade 10-1",
                    schedule={"Sunday": {"08:00": [math_10], "09:45": [physics_10]}}),
        SchoolClass(id="c11-2", name="Grade 11-2",
                    schedule={"Sunday": {"08:00": [math_11]}}),
    ]
    return teachers, classes, default_time_slots()


def _substitution(substitute_id: str, day=SUNDAY, time="08:00", class_id="c10-1"):
    return SubstitutionRecord(
        date=day, time=time, class_id=class_id, class_name="Grade 10-1",
        subject="Mathematics", absent_teacher_id="t1", absent_teacher_name="Sarah Cohen",
        substitute_teacher_id=substitute_id, substitute_teacher_name=substitute_id,
    )


# ─── VERFÜGBARKEIT ────────────────────────────────────────────────────────────

class TestAvailability:
    def test_full_containment_available(self):
        teachers, _, slots = _make_world()
        assert is_available(teachers[2], SUNDAY, "08:00", slots)

    def test_exact_boundaries_available(self):
        """Fenster 08:00–08:45 deckt den Slot 08:00–08:45 vollständig ab."""
        t = _make_teacher("x", "X", [], window=("08:00", "08:45"))
        assert is_available(t, SUNDAY, "08:00", default_time_slots())
        assert not is_available(t, SUNDAY, "08:45", default_time_slots())

    def test_partial_overlap_is_not_available(self):
        """Verfügbarkeit 08:00–09:00, Stunde 08:30–09:30 → nicht verfügbar."""
        slots = [TimeSlot(id="a", start="08:30", end="09:30")]
        t = _make_teacher("x", "X", [], window=("08:00", "09:00"))
        assert not is_available(t, SUNDAY, "08:30", slots)

    def test_unknown_slot_is_unavailable(self):
        teachers, _, slots = _make_world()
        assert not is_available(teachers[2], SUNDAY, "13:00", slots)

    def test_break_is_not_a_lesson_slot(self):
        teachers, _, slots = _make_world()
        assert not is_available(teachers[2], SUNDAY, "09:30", slots)

    def test_no_availability_on_weekday(self):
        teachers, _, slots = _make_world()
        david = teachers[3]
        assert not is_available(david, SUNDAY, "08:00", slots)
        assert is_available(david, MONDAY, "08:00", slots)

    def test_saturday_never_available(self):
        teachers, _, slots = _make_world()
        assert not is_available(teachers[2], SATURDAY, "08:00", slots)

    def test_multiple_windows(self):
        """Zwei Fenster am Tag: der Slot muss in eines davon vollständig passen."""
        t = Teacher(id="x", name="X", availability=[DayAvailability(day="Sunday", slots=[
            AvailabilityWindow(start="08:00", end="08:45"),
            AvailabilityWindow(start="10:30", end="12:00"),
        ])])
        slots = default_time_slots()
        assert is_available(t, SUNDAY, "08:00", slots)
        assert not is_available(t, SUNDAY, "08:45", slots)
        assert is_available(t, SUNDAY, "11:15", slots)


class TestAvailabilityStatus:
    def test_teaching(self):
        teachers, _, slots = _make_world()
        status = availability_status(teachers[0], datetime(2024, 6, 2, 8, 10), slots)
        assert status == AvailabilityStatus.TEACHING

    def test_available(self):
        teachers, _, slots = _make_world()
        status = availability_status(teachers[0], datetime(2024, 6, 2, 9, 0), slots)
        assert status == AvailabilityStatus.AVAILABLE

    def test_absent_wins_over_teaching(self):
        teachers, _, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        status = availability_status(teachers[0], datetime(2024, 6, 2, 8, 10), slots)
        assert status == AvailabilityStatus.ABSENT

    def test_absent_wins_over_not_in_school(self):
        david = _make_teacher("t2", "David Levi", [], days=["Monday"],
                              absences=[AbsenceDay(date=SUNDAY)])
        status = availability_status(david, datetime(2024, 6, 2, 8, 10), default_time_slots())
        assert status == AvailabilityStatus.ABSENT

    def test_not_in_school(self):
        teachers, _, slots = _make_world()
        status = availability_status(teachers[3], datetime(2024, 6, 2, 8, 10), slots)
        assert status == AvailabilityStatus.NOT_IN_SCHOOL

    def test_partial_absence_only_during_interval(self):
        absence = AbsenceDay(date=SUNDAY, is_all_day=False, start_time="09:45", end_time="12:00")
        teachers, _, slots = _make_world(sarah_absences=[absence])
        sarah = teachers[0]
        assert availability_status(sarah, datetime(2024, 6, 2, 8, 10), slots) \
            == AvailabilityStatus.TEACHING
        assert availability_status(sarah, datetime(2024, 6, 2, 10, 0), slots) \
            == AvailabilityStatus.ABSENT

    def test_break_and_outside_day_are_unknown(self):
        teachers, _, slots = _make_world()
        assert availability_status(teachers[2], datetime(2024, 6, 2, 9, 35), slots) \
            == AvailabilityStatus.UNKNOWN
        assert availability_status(teachers[2], datetime(2024, 6, 2, 14, 0), slots) \
            == AvailabilityStatus.UNKNOWN


class TestFreeTeachersBoard:
    def test_board_structure(self):
        teachers, _, slots = _make_world()
        board = free_teachers_board(teachers, SUNDAY, slots)
        assert list(board) == list(WEEKDAYS)
        assert list(board["Sunday"]) == ["08:00", "08:45", "09:45", "10:30", "11:15"]

    def test_teaching_absent_and_not_present_excluded(self):
        absence = AbsenceDay(date=SUNDAY, is_all_day=False, start_time="10:30", end_time="11:15")
        rachel = _make_teacher("t3", "Rachel Mizrahi", ["English"], absences=[absence])
        teachers, _, slots = _make_world()
        teachers = [teachers[0], teachers[3], rachel]
        board = free_teachers_board(teachers, SUNDAY, slots)

        assert "Sarah Cohen" not in board["Sunday"]["08:00"]      # unterrichtet
        assert "Sarah Cohen" in board["Sunday"]["08:45"]
        assert "David Levi" not in board["Sunday"]["08:45"]       # sonntags nicht da
        assert "David Levi" in board["Monday"]["08:45"]
        assert "Rachel Mizrahi" not in board["Sunday"]["10:30"]   # abwesend
        assert "Rachel Mizrahi" in board["Monday"]["10:30"]


# ─── KONFLIKTE ────────────────────────────────────────────────────────────────

class TestConflicts:
    def test_scheduled_teacher_detected(self):
        _, classes, _ = _make_world()
        assert is_already_scheduled("t1", SUNDAY, "08:00", classes)
        assert not is_already_scheduled("t1", SUNDAY, "08:45", classes)
        assert not is_already_scheduled("t1", MONDAY, "08:00", classes)

    def test_ignore_class(self):
        _, classes, _ = _make_world()
        assert not is_already_scheduled("t1", SUNDAY, "08:00", classes, ignore_class_id="c10-1")
        assert is_already_scheduled("t7", SUNDAY, "08:00", classes, ignore_class_id="c10-1")

    def test_only_exact_time_key(self):
        """Teilüberlappungen mit anderen Slot-Zeiten werden nicht geprüft."""
        _, classes, _ = _make_world()
        assert not is_already_scheduled("t1", SUNDAY, "08:30", classes)

    def test_saturday_never_scheduled(self):
        _, classes, _ = _make_world()
        assert not is_already_scheduled("t1", SATURDAY, "08:00", classes)

    def test_slot_candidates_keep_current_teacher(self):
        teachers, classes, slots = _make_world()
        candidates = slot_candidates(classes[0], SUNDAY, "08:00", teachers, classes, slots)
        ids = [t.id for t in candidates]
        assert "t1" in ids           # aktuelle Lehrkraft
        assert "t7" not in ids       # in 11-2 eingeplant
        assert "t3" in ids
        assert "t2" not in ids       # sonntags nicht verfügbar

    def test_slot_candidates_subject_filter(self):
        teachers, classes, slots = _make_world()
        candidates = slot_candidates(
            classes[0], SUNDAY, "08:45", teachers, classes, slots, subject="Mathematics"
        )
        assert [t.id for t in candidates] == ["t1", "t7"]

    def test_slot_candidates_reject_major(self):
        teachers, _, slots = _make_world()
        major = SchoolClass(id="c12-1", name="Grade 12-1", schedule={
            "Monday": {"11:15": [_lesson("Physics", "t1", "c12-1", major_id="m1")]},
        })
        with pytest.raises(MajorLessonError):
            slot_candidates(major, MONDAY, "11:15", teachers, [major], slots)


# ─── ABWESENHEITS-AUFLÖSUNG + ABDECKUNG ───────────────────────────────────────

class TestAbsenceExpansion:
    def test_all_day_absence_single_lesson(self):
        """Ganztägige Abwesenheit am Sonntag: genau die 08:00-Mathestunde ohne Vertretung."""
        sarah = _make_teacher(
            "t1", "Sarah Cohen", ["Mathematics"],
            schedule={"Sunday": {"08:00": [_lesson("Mathematics", "t1", "c10-1")]}},
            absences=[AbsenceDay(date=SUNDAY)],
        )
        cls = SchoolClass(id="c10-1", name="Grade 10-1", schedule={
            "Sunday": {"08:00": [_lesson("Mathematics", "t1", "c10-1")]},
        })
        affected = expand_affected_lessons(
            [sarah], [cls], [], default_time_slots(), DateRange.single(SUNDAY)
        )
        assert len(affected) == 1
        lesson = affected[0]
        assert lesson.class_id == "c10-1"
        assert lesson.class_name == "Grade 10-1"
        assert lesson.time == "08:00"
        assert lesson.date == SUNDAY
        assert lesson.absent_teacher_name == "Sarah Cohen"
        assert lesson.is_covered is False

    def test_substitution_covers_lesson(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        affected = expand_affected_lessons(
            teachers, classes, [_substitution("t3")], slots, DateRange.single(SUNDAY)
        )
        by_time = {a.time: a for a in affected}
        assert by_time["08:00"].is_covered is True
        assert by_time["09:45"].is_covered is False

    def test_coverage_downgrade_when_substitute_absent(self):
        rachel_absence = AbsenceDay(date=SUNDAY, is_all_day=False,
                                    start_time="08:00", end_time="08:30")
        rachel = _make_teacher("t3", "Rachel Mizrahi", ["English"], absences=[rachel_absence])
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        teachers = [t for t in teachers if t.id != "t3"] + [rachel]

        affected = expand_affected_lessons(
            teachers, classes, [_substitution("t3")], slots, DateRange.single(SUNDAY)
        )
        lesson = next(a for a in affected if a.time == "08:00" and a.class_id == "c10-1")
        assert lesson.is_covered is False

    def test_substitute_absent_elsewhere_keeps_coverage(self):
        rachel_absence = AbsenceDay(date=SUNDAY, is_all_day=False,
                                    start_time="10:30", end_time="12:00")
        rachel = _make_teacher("t3", "Rachel Mizrahi", ["English"], absences=[rachel_absence])
        slot = find_slot(default_time_slots(), "08:00")
        assert is_covered([_substitution("t3")], [rachel], SUNDAY, slot, "c10-1")

    def test_unknown_substitute_still_covers(self):
        slot = find_slot(default_time_slots(), "08:00")
        assert is_covered([_substitution("gone")], [], SUNDAY, slot, "c10-1")

    def test_find_substitution_matches_day_time_class(self):
        records = [_substitution("t3")]
        assert find_substitution(records, SUNDAY, "08:00", "c10-1") is records[0]
        assert find_substitution(records, MONDAY, "08:00", "c10-1") is None
        assert find_substitution(records, SUNDAY, "08:45", "c10-1") is None
        assert find_substitution(records, SUNDAY, "08:00", "c11-2") is None

    def test_partial_absence_half_open(self):
        """Abwesenheit 08:45–09:45 trifft weder 08:00–08:45 noch 09:45–10:30."""
        absence = AbsenceDay(date=SUNDAY, is_all_day=False, start_time="08:45", end_time="09:45")
        teachers, classes, slots = _make_world(sarah_absences=[absence])
        affected = expand_affected_lessons(teachers, classes, [], slots, DateRange.single(SUNDAY))
        assert affected == []

    def test_partial_absence_hits_later_lesson(self):
        absence = AbsenceDay(date=SUNDAY, is_all_day=False, start_time="09:00", end_time="12:00")
        teachers, classes, slots = _make_world(sarah_absences=[absence])
        affected = expand_affected_lessons(teachers, classes, [], slots, DateRange.single(SUNDAY))
        assert [(a.time, a.subject) for a in affected] == [("09:45", "Physics")]

    def test_absence_on_other_day_ignored(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=MONDAY)])
        affected = expand_affected_lessons(teachers, classes, [], slots, DateRange.single(SUNDAY))
        assert affected == []

    def test_datetime_absence_matches_calendar_day(self):
        """Abwesenheiten aus ISO-Zeitstempeln werden auf den Kalendertag normalisiert."""
        absence = AbsenceDay.model_validate({"date": "2024-06-02T00:00:00.000Z"})
        teachers, classes, slots = _make_world(sarah_absences=[absence])
        affected = expand_affected_lessons(teachers, classes, [], slots, DateRange.single(SUNDAY))
        assert len(affected) == 2

    def test_stale_references_skipped(self):
        sarah = _make_teacher(
            "t1", "Sarah Cohen", ["Mathematics"],
            schedule={"Sunday": {
                "13:00": [_lesson("Mathematics", "t1", "c10-1")],   # Slot existiert nicht
                "08:00": [_lesson("Mathematics", "t1", "gone")],    # Klasse existiert nicht
                "08:45": [_lesson("Mathematics", "t1", "c10-1")],
            }},
            absences=[AbsenceDay(date=SUNDAY)],
        )
        cls = SchoolClass(id="c10-1", name="Grade 10-1")
        affected = expand_affected_lessons(
            [sarah], [cls], [], default_time_slots(), DateRange.single(SUNDAY)
        )
        assert [(a.time, a.class_id) for a in affected] == [("08:45", "c10-1")]

    def test_sorted_by_date_time_class(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        avi = teachers[1].model_copy(update={"absences": [AbsenceDay(date=SUNDAY)]})
        teachers = [avi, teachers[0]] + teachers[2:]
        affected = expand_affected_lessons(
            teachers, classes, [], slots, DateRange(start=SUNDAY, end=MONDAY)
        )
        assert [(a.time, a.class_id) for a in affected] == [
            ("08:00", "c10-1"), ("08:00", "c11-2"), ("09:45", "c10-1"),
        ]

    def test_multi_day_range(self):
        monday_math = _lesson("Mathematics", "t1", "c10-1")
        sarah = _make_teacher(
            "t1", "Sarah Cohen", ["Mathematics"],
            schedule={"Sunday": {"08:00": [monday_math]}, "Monday": {"08:45": [monday_math]}},
            absences=[AbsenceDay(date=SUNDAY), AbsenceDay(date=MONDAY)],
        )
        cls = SchoolClass(id="c10-1", name="Grade 10-1")
        affected = expand_affected_lessons(
            [sarah], [cls], [], default_time_slots(), DateRange(start=SUNDAY, end=MONDAY)
        )
        assert [(a.date, a.time) for a in affected] == [(SUNDAY, "08:00"), (MONDAY, "08:45")]

    def test_idempotent(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        subs = [_substitution("t3")]
        first = expand_affected_lessons(teachers, classes, subs, slots, DateRange.week_of(SUNDAY))
        second = expand_affected_lessons(teachers, classes, subs, slots, DateRange.week_of(SUNDAY))
        assert [a.model_dump() for a in first] == [a.model_dump() for a in second]

    def test_inputs_not_mutated(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        before = [t.model_dump() for t in teachers]
        expand_affected_lessons(teachers, classes, [], slots, DateRange.single(SUNDAY))
        assert [t.model_dump() for t in teachers] == before


class TestDateRange:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            DateRange(start=MONDAY, end=SUNDAY)

    def test_week_of_starts_sunday(self):
        week = DateRange.week_of(date(2024, 6, 5))
        assert week.start == SUNDAY
        assert week.end == SATURDAY
        assert len(list(week.days())) == 7

    def test_week_of_saturday_contains_saturday(self):
        week = DateRange.week_of(SATURDAY)
        assert week.start == SUNDAY
        assert week.start <= SATURDAY <= week.end


class TestNeededSubstitutes:
    def test_grouped_by_date_without_covered(self):
        monday_math = _lesson("Mathematics", "t1", "c10-1")
        sarah = _make_teacher(
            "t1", "Sarah Cohen", ["Mathematics"],
            schedule={"Sunday": {"08:00": [monday_math], "08:45": [monday_math]},
                      "Monday": {"08:00": [monday_math]}},
            absences=[AbsenceDay(date=SUNDAY), AbsenceDay(date=MONDAY)],
        )
        cls = SchoolClass(id="c10-1", name="Grade 10-1")
        affected = expand_affected_lessons(
            [sarah], [cls], [_substitution("t3")], default_time_slots(),
            DateRange(start=SUNDAY, end=MONDAY),
        )
        grouped = needed_substitutes(affected)

        assert list(grouped) == [SUNDAY, MONDAY]
        assert [a.time for a in grouped[SUNDAY]] == ["08:45"]
        assert [a.time for a in grouped[MONDAY]] == ["08:00"]

    def test_empty_when_all_covered(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(
            date=SUNDAY, is_all_day=False, start_time="08:00", end_time="08:45",
        )])
        affected = expand_affected_lessons(
            teachers, classes, [_substitution("t3")], slots, DateRange.single(SUNDAY)
        )
        assert len(affected) == 1
        assert needed_substitutes(affected) == {}


# ─── VERTRETUNGSVORSCHLAG ─────────────────────────────────────────────────────

def _monday_math(time: str = "08:00") -> LessonDetails:
    return LessonDetails(subject="Mathematics", date=MONDAY, time=time)


class TestFindSubstitute:
    def test_single_qualified_free_teacher(self):
        """Genau eine freie Mathe-Lehrkraft im Pool wird empfohlen."""
        teachers, classes, slots = _make_world()
        pool = [teachers[2], teachers[1]]     # Rachel (Englisch), Avi (Mathe)
        result = find_substitute(_monday_math(), pool, classes, slots)

        assert result.recommendation == "Avi Friedman"
        assert result.recommendation_id == "t7"
        assert result.supervisory_only is False
        assert "qualified" in result.reasoning
        assert "Mathematics" in result.reasoning

    def test_supervisory_fallback(self):
        """Niemand im Pool unterrichtet das Fach, eine andere Lehrkraft ist frei."""
        teachers, classes, slots = _make_world()
        pool = [teachers[3], teachers[2]]     # David, Rachel
        result = find_substitute(
            LessonDetails(subject="Mathematics", date=SUNDAY, time="08:00"), pool, classes, slots
        )
        assert result.recommendation == "Rachel Mizrahi"    # David sonntags nicht da
        assert result.supervisory_only is True
        assert "supervisory" in result.reasoning
        assert result.qualified_names == []

    def test_no_qualified_and_no_supervisor(self):
        teachers, classes, slots = _make_world()
        pool = [teachers[3]]                  # David, sonntags nicht da
        result = find_substitute(
            LessonDetails(subject="Mathematics", date=SUNDAY, time="08:00"), pool, classes, slots
        )
        assert result.recommendation is None
        assert result.reasoning is not None
        assert "no other teacher is free" in result.reasoning

    def test_qualified_but_none_free(self):
        """Alle Fachlehrkräfte verplant oder nicht verfügbar → kein Vorschlag, auch keine Aufsicht."""
        part_time = _make_teacher("t9", "Dana Katz", ["Mathematics"], days=["Monday"])
        teachers, classes, slots = _make_world(extra_teachers=[part_time])
        pool = [teachers[1], teachers[2], part_time]   # Avi verplant, Rachel frei, Dana nicht da
        result = find_substitute(
            LessonDetails(subject="Mathematics", date=SUNDAY, time="08:00"), pool, classes, slots
        )
        assert result.recommendation is None
        assert "free" in result.reasoning
        assert result.substitute_options == []

    def test_absent_teacher_not_free(self):
        avi = _make_teacher("t7", "Avi Friedman", ["Mathematics"],
                            absences=[AbsenceDay(date=MONDAY)])
        other = _make_teacher("t9", "Dana Katz", ["Mathematics"])
        _, classes, slots = _make_world()
        result = find_substitute(_monday_math(), [avi, other], classes, slots)
        assert result.recommendation == "Dana Katz"

    def test_senior_classes_marker_wins(self):
        a = _make_teacher("a", "Teacher A", ["Mathematics"])
        b = _make_teacher("b", "Teacher B", ["Mathematics"], preferences="senior classes")
        _, classes, slots = _make_world()
        result = find_substitute(_monday_math(), [a, b], classes, slots)

        assert result.recommendation == "Teacher B"
        assert [(o.teacher_id, o.score) for o in result.substitute_options] == [("b", 12), ("a", 10)]
        assert result.qualified_names == ["Teacher B", "Teacher A"]
        assert "Preferences: senior classes." in result.reasoning

    def test_tie_keeps_pool_order(self):
        a = _make_teacher("a", "Teacher A", ["Mathematics"])
        b = _make_teacher("b", "Teacher B", ["Mathematics"])
        _, classes, slots = _make_world()
        assert find_substitute(_monday_math(), [a, b], classes, slots).recommendation == "Teacher A"
        assert find_substitute(_monday_math(), [b, a], classes, slots).recommendation == "Teacher B"

    def test_special_education_only_for_special_lessons(self):
        a = _make_teacher("a", "Teacher A", ["Mathematics", "special education"],
                          preferences="special education")
        b = _make_teacher("b", "Teacher B", ["Mathematics", "special education"],
                          preferences="senior classes")
        _, classes, slots = _make_world()

        math = find_substitute(_monday_math(), [a, b], classes, slots)
        assert math.recommendation == "Teacher B"

        special = LessonDetails(subject="special education", date=MONDAY, time="08:00")
        result = find_substitute(special, [a, b], classes, slots)
        assert result.recommendation == "Teacher A"
        assert result.substitute_options[0].score == 15

    def test_special_education_beats_senior_classes(self):
        senior = _make_teacher("a", "Teacher A", ["special education"], preferences="senior classes")
        special = _make_teacher("b", "Teacher B", ["special education"],
                                preferences="special education")
        _, classes, slots = _make_world()
        lesson = LessonDetails(subject="special education", date=MONDAY, time="08:00")
        result = find_substitute(lesson, [senior, special], classes, slots)
        assert result.recommendation == "Teacher B"
        assert [(o.teacher_id, o.score) for o in result.substitute_options] == [("b", 15), ("a", 12)]

    def test_capitalized_subject_is_not_special_education(self):
        a = _make_teacher("a", "Teacher A", ["Special Education"], preferences="special education")
        _, classes, slots = _make_world()
        lesson = LessonDetails(subject="Special Education", date=MONDAY, time="08:00")
        assert find_substitute(lesson, [a], classes, slots).substitute_options[0].score == 10

    def test_markers_are_case_sensitive(self):
        a = _make_teacher("a", "Teacher A", ["Mathematics"])
        b = _make_teacher("b", "Teacher B", ["Mathematics"], preferences="Senior Classes")
        _, classes, slots = _make_world()
        assert find_substitute(_monday_math(), [a, b], classes, slots).recommendation == "Teacher A"

    def test_custom_scoring_weights(self):
        a = _make_teacher("a", "Teacher A", ["Mathematics"])
        b = _make_teacher("b", "Teacher B", ["Mathematics"], preferences="senior classes")
        _, classes, slots = _make_world()
        scoring = ScoringConfig(weight_senior_classes=0)
        result = SubstitutionFinder(scoring).find_substitute(_monday_math(), [a, b], classes, slots)
        assert result.recommendation == "Teacher A"

    def test_never_raises_on_empty_pool(self):
        _, classes, slots = _make_world()
        result = find_substitute(_monday_math(), [], classes, slots)
        assert result.recommendation is None
        assert result.reasoning

    def test_random_pools_only_recommend_free_teachers(self):
        """Wer empfohlen wird, ist verfügbar und nicht verplant."""
        teachers, classes, slots = _make_world()
        rng = random.Random(7)
        for _ in range(50):
            pool = rng.sample(teachers, rng.randint(0, len(teachers)))
            day = rng.choice([SUNDAY, MONDAY])
            time = rng.choice(["08:00", "08:45", "09:45"])
            lesson = LessonDetails(subject=rng.choice(["Mathematics", "English"]),
                                   date=day, time=time)
            result = find_substitute(lesson, pool, classes, slots)
            if result.recommendation_id is None:
                continue
            chosen = next(t for t in pool if t.id == result.recommendation_id)
            assert is_available(chosen, day, time, slots)
            assert not is_already_scheduled(chosen.id, day, time, classes)


class TestRecommendForLessons:
    def test_skips_covered_and_excludes_absent_teacher(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        affected = expand_affected_lessons(
            teachers, classes, [_substitution("t3")], slots, DateRange.single(SUNDAY)
        )
        results = SubstitutionFinder().recommend_for_lessons(affected, teachers, classes, slots)

        assert [(lesson.time, lesson.subject) for lesson, _ in results] == [("09:45", "Physics")]
        rec = results[0][1]
        assert rec.recommendation_id != "t1"
        # Physik kann niemand außer Sarah → Aufsicht durch eine freie Lehrkraft
        assert rec.supervisory_only is True

    def test_build_substitution_record(self):
        teachers, classes, slots = _make_world(sarah_absences=[AbsenceDay(date=SUNDAY)])
        lesson = expand_affected_lessons(
            teachers, classes, [], slots, DateRange.single(SUNDAY)
        )[0]
        record = build_substitution_record(lesson, teachers[2])

        assert record.date == SUNDAY
        assert record.time == "08:00"
        assert record.class_id == "c10-1"
        assert record.class_name == "Grade 10-1"
        assert record.absent_teacher_id == "t1"
        assert record.substitute_teacher_id == "t3"
        assert record.substitute_teacher_name == "Rachel Mizrahi"
