from timetabler.services.conflict_service import (
    FACULTY_CONFLICT,
    ROOM_CONFLICT,
    count_conflicts_by_kind,
    detect_conflicts,
)

DAYS = ["Monday", "Tuesday"]
SLOTS = ["09:00-10:00", "10:00-11:00"]


def test_shared_faculty_reported_once_per_pair(make_timetable):
    timetable = make_timetable(
        2,
        DAYS,
        SLOTS,
        [
            (0, "Monday", "09:00-10:00", "Math", "Dr. A", "Room-101"),
            (1, "Monday", "09:00-10:00", "Physics", "Dr. A", "Room-102"),
        ],
    )

    conflicts = detect_conflicts(timetable)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.kind == FACULTY_CONFLICT
    assert conflict.batches == (0, 1)
    assert conflict.resource == "Dr. A"
    assert conflict.severity == "high"
    assert conflict.description == "Faculty Dr. A assigned to multiple batches"
    assert conflict.details == "Monday 09:00-10:00: Batch 1 and Batch 2"


def test_shared_room_reports_medium_severity(make_timetable):
    timetable = make_timetable(
        2,
        DAYS,
        SLOTS,
        [
            (0, "Tuesday", "10:00-11:00", "Math", "Dr. A", "Room-101"),
            (1, "Tuesday", "10:00-11:00", "Physics", "Dr. B", "Room-101"),
        ],
    )

    conflicts = detect_conflicts(timetable)

    assert [item.kind for item in conflicts] == [ROOM_CONFLICT]
    assert conflicts[0].severity == "medium"
    assert conflicts[0].description == "Room Room-101 double-booked"
    assert "Math and Physics" in conflicts[0].details


def test_faculty_conflict_precedes_room_conflict(make_timetable):
    timetable = make_timetable(
        2,
        DAYS,
        SLOTS,
        [
            (0, "Monday", "10:00-11:00", "Math", "Dr. A", "Room-101"),
            (1, "Monday", "10:00-11:00", "Math", "Dr. A", "Room-101"),
        ],
    )

    assert [item.kind for item in detect_conflicts(timetable)] == [FACULTY_CONFLICT, ROOM_CONFLICT]


def test_lab_rooms_never_conflict(make_timetable):
    timetable = make_timetable(
        3,
        DAYS,
        SLOTS,
        [
            (0, "Monday", "09:00-10:00", "Chemistry", "Dr. A", "Lab-A"),
            (1, "Monday", "09:00-10:00", "Chemistry", "Dr. B", "Lab-A"),
            (2, "Monday", "09:00-10:00", "Chemistry", "Dr. C", "Lab-A"),
        ],
    )
    assert detect_conflicts(timetable) == []


def test_every_unordered_pair_is_listed(make_timetable):
    timetable = make_timetable(
        3,
        DAYS,
        SLOTS,
        [
            (0, "Tuesday", "09:00-10:00", "Math", "Dr. A", "Room-101"),
            (1, "Tuesday", "09:00-10:00", "Math", "Dr. A", "Room-102"),
            (2, "Tuesday", "09:00-10:00", "Math", "Dr. A", "Room-103"),
        ],
    )

    conflicts = detect_conflicts(timetable)

    assert [item.batches for item in conflicts] == [(0, 1), (0, 2), (1, 2)]
    assert count_conflicts_by_kind(conflicts) == {FACULTY_CONFLICT: 3, ROOM_CONFLICT: 0}


def test_detection_is_repeatable(make_timetable):
    timetable = make_timetable(
        2,
        DAYS,
        SLOTS,
        [
            (0, "Monday", "09:00-10:00", "Math", "Dr. A", "Room-101"),
            (1, "Monday", "09:00-10:00", "Math", "Dr. A", "Room-101"),
            (0, "Tuesday", "10:00-11:00", "Physics", "Dr. B", "Room-102"),
            (1, "Tuesday", "10:00-11:00", "Chemistry", "Dr. C", "Room-102"),
        ],
    )

    first = detect_conflicts(timetable)
    assert detect_conflicts(timetable) == first
    assert len(first) == 3


def test_empty_timetable_has_no_conflicts(make_timetable):
    assert detect_conflicts(make_timetable(4, DAYS, SLOTS)) == []
