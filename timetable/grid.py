"""
Weekly grid: 6 working days x 8 fixed periods, lunch at index 4.

Any caller persisting results maps slot indices back to these clock times.
"""
from typing import Dict, List, Optional, Tuple

from .model import TimeSlot

DAYS: Tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

TIME_SLOTS: List[TimeSlot] = [
    TimeSlot("09:15", "10:05", "9:15 - 10:05", 0, 1, "morning"),
    TimeSlot("10:05", "10:55", "10:05 - 10:55", 1, 2, "morning"),
    TimeSlot("11:05", "11:55", "11:05 - 11:55", 2, 3, "morning"),
    TimeSlot("11:55", "12:45", "11:55 - 12:45", 3, 4, "morning"),
    TimeSlot("12:45", "13:25", "12:45 - 1:25", 4, 0, "lunch"),
    TimeSlot("13:25", "14:15", "1:25 - 2:15", 5, 5, "afternoon"),
    TimeSlot("14:15", "15:05", "2:15 - 3:05", 6, 6, "afternoon"),
    TimeSlot("15:05", "15:55", "3:05 - 3:55", 7, 7, "afternoon"),
]

LUNCH_INDEX = 4
CLASS_SLOTS: List[TimeSlot] = [s for s in TIME_SLOTS if not s.is_lunch]
MORNING_SLOTS: List[TimeSlot] = [s for s in TIME_SLOTS if s.session == "morning"]
AFTERNOON_SLOTS: List[TimeSlot] = [s for s in TIME_SLOTS if s.session == "afternoon"]

# Two-period lab blocks that never cross lunch
MORNING_LAB_PAIRS: List[Tuple[int, int]] = [(0, 1), (1, 2), (2, 3)]
AFTERNOON_LAB_PAIRS: List[Tuple[int, int]] = [(5, 6), (6, 7)]

DEFAULT_ROOMS: List[str] = ["Room 101", "Room 102", "Room 103", "Room 201", "Room 202", "Room 203"]
DEFAULT_LABS: List[str] = ["Lab 1", "Lab 2", "Lab 3", "Lab 4"]

# Seminars, soft skills and mini projects go here
LIGHT_DAYS: Tuple[str, ...] = ("Friday", "Saturday")

_SLOT_BY_START: Dict[str, TimeSlot] = {s.start: s for s in TIME_SLOTS}


def _hhmm(value: str) -> str:
    # "9:15", "09:15" and "09:15:00" -> "09:15"
    text = str(value).strip()[:5]
    if len(text) >= 4 and text[1] == ":":
        text = "0" + text[:4]
    return text


def slot_for_start(start_time: str) -> Optional[TimeSlot]:
    return _SLOT_BY_START.get(_hhmm(start_time))


def slots_covering(start_time: str, end_time: str) -> List[int]:
    """
    Grid indices overlapping [start_time, end_time).

    Falls back to the slot starting at start_time when the end time is
    missing or not after the start.
    """
    start = _hhmm(start_time)
    end = _hhmm(end_time) if end_time else ""
    if not end or end <= start:
        slot = slot_for_start(start)
        return [slot.index] if slot else []
    return [s.index for s in TIME_SLOTS if s.start < end and s.end > start]


def is_valid_lab_pair(indices) -> bool:
    pair = tuple(indices)
    return pair in MORNING_LAB_PAIRS or pair in AFTERNOON_LAB_PAIRS


def session_of(index: int) -> str:
    return TIME_SLOTS[index].session
