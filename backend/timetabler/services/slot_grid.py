from __future__ import annotations

from timetabler.schemas.settings import minutes_to_time, parse_time_to_minutes

SLOT_MINUTES = 60


def build_time_slots(start_time: str, end_time: str, max_classes: int) -> list[str]:
    """Return the ordered "HH:MM-HH:MM" labels of one working day.

    Slots are a full hour each. Generation stops once the next slot would run
    past ``end_time`` or ``max_classes`` labels exist; leftover minutes are
    dropped. An empty list means the window holds no slot at all.
    """
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)

    slots: list[str] = []
    current = start
    while current + SLOT_MINUTES <= end and len(slots) < max_classes:
        slots.append(f"{minutes_to_time(current)}-{minutes_to_time(current + SLOT_MINUTES)}")
        current += SLOT_MINUTES
    return slots
