# timetable/evaluation.py
from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict, Dict, List, Sequence, Set, Tuple

import numpy as np

from .config import ScheduleConstraints
from .grid import DAYS, LUNCH_INDEX, TIME_SLOTS, is_valid_lab_pair
from .model import GeneratedAssignment


@dataclass
class AuditResult:
    room_clashes: int
    teacher_clashes: int
    lunch_violations: int
    subject_overflows: int
    theory_overflows: int
    continuity_overflows: int
    bad_lab_blocks: int
    rooms: List[str]
    teachers: List[str]
    room_matrix: np.ndarray       # [room][day][slot] occupant count
    teacher_matrix: np.ndarray    # [teacher][day][slot] occupant count
    violations: List[str]

    @property
    def is_clean(self) -> bool:
        return not (
            self.room_clashes
            or self.teacher_clashes
            or self.lunch_violations
            or self.subject_overflows
            or self.theory_overflows
            or self.continuity_overflows
            or self.bad_lab_blocks
        )


def _runs(occupied: Set[int]) -> List[List[int]]:
    """Maximal runs of adjacent occupied indices; lunch always splits a run."""
    runs: List[List[int]] = []
    current: List[int] = []
    for idx in range(len(TIME_SLOTS)):
        if idx in occupied and idx != LUNCH_INDEX:
            current.append(idx)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def audit_schedule(
    assignments: Sequence[GeneratedAssignment],
    constraints: ScheduleConstraints,
) -> AuditResult:
    """Recompute every placement invariant from a finished assignment list."""
    rooms = sorted({a.room for a in assignments})
    teachers = sorted({a.teacher_id for a in assignments})
    room_pos = {r: i for i, r in enumerate(rooms)}
    teacher_pos = {t: i for i, t in enumerate(teachers)}
    day_pos = {d: i for i, d in enumerate(DAYS)}

    n_days, n_slots = len(DAYS), len(TIME_SLOTS)
    ch_room = np.zeros((len(rooms), n_days, n_slots), dtype=int)
    ch_teach = np.zeros((len(teachers), n_days, n_slots), dtype=int)

    room_clashes = teacher_clashes = lunch = bad_labs = 0
    violations: List[str] = []
    subject_periods: DefaultDict[Tuple[str, str], int] = defaultdict(int)
    theory_slots: DefaultDict[Tuple[str, str], Set[int]] = defaultdict(set)
    busy_slots: DefaultDict[Tuple[str, str], Set[int]] = defaultdict(set)

    for a in assignments:
        if a.day not in day_pos:
            violations.append(f"Unknown day {a.day} for {a.course_code}")
            continue
        d = day_pos[a.day]

        if a.is_lab and not is_valid_lab_pair(a.slot_indices):
            bad_labs += 1
            violations.append(f"Lab block {a.slot_indices} for {a.course_code} on {a.day} is not a valid pair")
        elif not a.is_lab and len(a.slot_indices) != 1:
            bad_labs += 1
            violations.append(f"Theory block {a.slot_indices} for {a.course_code} on {a.day} spans several periods")

        for s in a.slot_indices:
            if s == LUNCH_INDEX:
                lunch += 1
                violations.append(f"{a.course_code} placed in lunch on {a.day}")
            ch_room[room_pos[a.room], d, s] += 1
            ch_teach[teacher_pos[a.teacher_id], d, s] += 1
            if ch_room[room_pos[a.room], d, s] > 1:
                room_clashes += 1
                violations.append(f"Room clash {a.room} on {a.day} slot {s}")
            if ch_teach[teacher_pos[a.teacher_id], d, s] > 1:
                teacher_clashes += 1
                violations.append(f"Teacher clash {a.teacher_name} on {a.day} slot {s}")

        subject_periods[(a.offering_id, a.day)] += a.periods
        busy_slots[(a.teacher_id, a.day)].update(a.slot_indices)
        if not a.is_lab:
            theory_slots[(a.teacher_id, a.day)].update(a.slot_indices)

    subject_over = 0
    for (oid, day), periods in subject_periods.items():
        if periods > constraints.max_periods_per_subject_per_day:
            subject_over += 1
            violations.append(f"Offering {oid} has {periods} periods on {day}")

    theory_over = continuity_over = 0
    for (tid, day), theory in theory_slots.items():
        if len(theory) > constraints.max_theory_per_faculty_per_day:
            theory_over += 1
            violations.append(f"Teacher {tid} teaches {len(theory)} theory periods on {day}")
        # runs made only of lab periods are not bound by the continuity limit
        for run in _runs(busy_slots[(tid, day)]):
            if len(run) > constraints.max_continuous_theory and theory.intersection(run):
                continuity_over += 1
                violations.append(f"Teacher {tid} has {len(run)} continuous periods on {day}")

    return AuditResult(
        room_clashes=room_clashes,
        teacher_clashes=teacher_clashes,
        lunch_violations=lunch,
        subject_overflows=subject_over,
        theory_overflows=theory_over,
        continuity_overflows=continuity_over,
        bad_lab_blocks=bad_labs,
        rooms=rooms,
        teachers=teachers,
        room_matrix=ch_room,
        teacher_matrix=ch_teach,
        violations=violations,
    )


def occupancy_frame_data(matrix: np.ndarray, entity: int) -> Dict[str, List[int]]:
    """Slot-by-day counts for one entity, keyed by day (for DataFrame building)."""
    return {day: matrix[entity, d, :].tolist() for d, day in enumerate(DAYS)}
