# timetable/workload.py
from typing import Dict, List, Sequence

from .config import ScheduleConstraints
from .grid import DAYS, session_of
from .model import FacultyWorkload, GeneratedAssignment


def _lightest_day(periods_per_day: Dict[str, int]) -> str:
    # ties resolved Monday -> Saturday
    return min(DAYS, key=lambda d: periods_per_day.get(d, 0))


def build_faculty_workloads(assignments: Sequence[GeneratedAssignment]) -> List[FacultyWorkload]:
    """Per-teacher view of the committed assignments, in first-seen teacher order."""
    by_teacher: Dict[str, FacultyWorkload] = {}
    for a in assignments:
        wl = by_teacher.get(a.teacher_id)
        if wl is None:
            wl = FacultyWorkload(teacher_id=a.teacher_id, teacher_name=a.teacher_name)
            by_teacher[a.teacher_id] = wl

        wl.total_periods += a.periods
        wl.periods_per_day[a.day] = wl.periods_per_day.get(a.day, 0) + a.periods
        for idx in a.slot_indices:
            session = session_of(idx)
            if session == "morning":
                wl.morning_periods += 1
            elif session == "afternoon":
                wl.afternoon_periods += 1
        wl.day_schedule.setdefault(a.day, []).append(a)

    for wl in by_teacher.values():
        wl.lightest_day = _lightest_day(wl.periods_per_day)
    return list(by_teacher.values())


def workload_justification(
    workloads: Sequence[FacultyWorkload],
    assignments: Sequence[GeneratedAssignment],
    constraints: ScheduleConstraints,
) -> List[str]:
    lines: List[str] = []
    # two extra periods leave room for one lab block on top of the theory cap
    ceiling = constraints.max_theory_per_faculty_per_day + 2
    for wl in workloads:
        busiest = wl.max_periods_per_day
        if busiest <= ceiling:
            lines.append(f"✅ {wl.teacher_name}: Max {busiest} periods/day, balanced across week")
        else:
            lines.append(f"⚠️ {wl.teacher_name}: {busiest} periods on the busiest day (limit {ceiling})")

    lines.append(
        f"📊 Faculty constraints: Max {constraints.max_theory_per_faculty_per_day} theory/day, "
        f"≤{constraints.max_continuous_theory} continuous, "
        f"≥{constraints.min_free_periods_per_faculty_per_day} free period/day"
    )
    lines.append(
        f"📊 Subject constraint: Max {constraints.max_periods_per_subject_per_day} periods of same subject per day"
    )
    lines.append(f"✅ Generated {len(assignments)} total time slots")
    return lines
