"""
Per-run resource trackers.

Every check is read-only. Marking is set-union, so committing the same
(day, indices) twice leaves the state unchanged.
"""
import random
from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .config import ScheduleConstraints
from .grid import (
    AFTERNOON_LAB_PAIRS,
    AFTERNOON_SLOTS,
    CLASS_SLOTS,
    DAYS,
    LUNCH_INDEX,
    MORNING_LAB_PAIRS,
    MORNING_SLOTS,
    TIME_SLOTS,
    slots_covering,
)
from .model import OccupiedSlot

DaySets = DefaultDict[str, DefaultDict[str, Set[int]]]


def _nested_sets() -> DaySets:
    return defaultdict(lambda: defaultdict(set))


class SlotTracker:
    """Occupied grid indices per day for the section being scheduled."""

    def __init__(self):
        self.used: Dict[str, Set[int]] = {day: {LUNCH_INDEX} for day in DAYS}

    def mark_existing(self, existing: Iterable[OccupiedSlot]) -> None:
        for entry in existing or []:
            day = str(entry.day).strip().capitalize()
            if day not in self.used:
                continue
            self.used[day].update(slots_covering(entry.start_time, entry.end_time))

    def is_available(self, day: str, index: int) -> bool:
        return day in self.used and index not in self.used[day]

    def are_available(self, day: str, indices: Sequence[int]) -> bool:
        return all(self.is_available(day, idx) for idx in indices)

    def mark_used(self, day: str, indices: Sequence[int]) -> None:
        if day in self.used:
            self.used[day].update(indices)

    def available_slots(self, day: str, session: Optional[str] = None) -> List[int]:
        if session == "morning":
            pool = MORNING_SLOTS
        elif session == "afternoon":
            pool = AFTERNOON_SLOTS
        else:
            pool = CLASS_SLOTS
        return [s.index for s in pool if self.is_available(day, s.index)]

    def lab_pairs(self, day: str, prefer_afternoon: bool, rng: random.Random) -> List[Tuple[int, int]]:
        """Free two-period blocks, preferred session first, each half shuffled."""
        morning = [p for p in MORNING_LAB_PAIRS if self.are_available(day, p)]
        afternoon = [p for p in AFTERNOON_LAB_PAIRS if self.are_available(day, p)]
        rng.shuffle(morning)
        rng.shuffle(afternoon)
        return afternoon + morning if prefer_afternoon else morning + afternoon


class FacultyTracker:
    def __init__(self):
        self.schedules: DaySets = _nested_sets()
        self.theory: DaySets = _nested_sets()

    def _busy(self, teacher_id: str, day: str) -> Set[int]:
        return self.schedules.get(teacher_id, {}).get(day, set())

    def can_assign(
        self,
        teacher_id: str,
        day: str,
        indices: Sequence[int],
        is_lab: bool,
        constraints: ScheduleConstraints,
    ) -> bool:
        busy = self._busy(teacher_id, day)
        if any(idx in busy for idx in indices):
            return False
        if is_lab:
            return True
        if self.theory_count(teacher_id, day) >= constraints.max_theory_per_faculty_per_day:
            return False
        return self.continuous_run(teacher_id, day, indices[0]) <= constraints.max_continuous_theory

    def continuous_run(self, teacher_id: str, day: str, index: int) -> int:
        """Length of the occupied run that would contain `index`; lunch breaks it."""
        busy = self._busy(teacher_id, day)
        count = 1
        pos = index - 1
        while pos >= 0 and pos != LUNCH_INDEX and pos in busy:
            count += 1
            pos -= 1
        pos = index + 1
        while pos < len(TIME_SLOTS) and pos != LUNCH_INDEX and pos in busy:
            count += 1
            pos += 1
        return count

    def assign(self, teacher_id: str, day: str, indices: Sequence[int], is_lab: bool) -> None:
        self.schedules[teacher_id][day].update(indices)
        if not is_lab:
            self.theory[teacher_id][day].update(indices)

    def theory_count(self, teacher_id: str, day: str) -> int:
        return len(self.theory.get(teacher_id, {}).get(day, ()))

    def periods_on(self, teacher_id: str, day: str) -> int:
        return len(self._busy(teacher_id, day))

    def free_periods(self, teacher_id: str, day: str) -> int:
        return len(CLASS_SLOTS) - self.periods_on(teacher_id, day)

    def least_loaded_day(self, teacher_id: str, exclude: Iterable[str] = ()) -> Optional[str]:
        # strict < keeps the earliest day on ties
        excluded = set(exclude)
        best, best_load = None, None
        for day in DAYS:
            if day in excluded:
                continue
            load = self.periods_on(teacher_id, day)
            if best_load is None or load < best_load:
                best, best_load = day, load
        return best


class RoomTracker:
    def __init__(self):
        self.schedules: DaySets = _nested_sets()

    def is_available(self, room: str, day: str, indices: Sequence[int]) -> bool:
        if room not in self.schedules or day not in self.schedules[room]:
            return True
        taken = self.schedules[room][day]
        return not any(idx in taken for idx in indices)

    def first_available(self, rooms: Sequence[str], day: str, indices: Sequence[int]) -> Optional[str]:
        for room in rooms:
            if self.is_available(room, day, indices):
                return room
        return None

    def assign(self, room: str, day: str, indices: Sequence[int]) -> None:
        self.schedules[room][day].update(indices)


class SubjectTracker:
    """Periods of one offering already committed on each day."""

    def __init__(self):
        self.periods: DaySets = _nested_sets()

    def periods_for(self, offering_id: str, day: str) -> int:
        if offering_id not in self.periods:
            return 0
        return len(self.periods[offering_id].get(day, ()))

    def can_assign(self, offering_id: str, day: str, periods_to_add: int, max_per_day: int) -> bool:
        return self.periods_for(offering_id, day) + periods_to_add <= max_per_day

    def assign(self, offering_id: str, day: str, indices: Sequence[int]) -> None:
        self.periods[offering_id][day].update(indices)
