"""
Tabular views of a generated timetable and the file writers used by run.py.
"""
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from .classification import abbreviation
from .grid import DAYS, TIME_SLOTS
from .model import FacultyWorkload, GeneratedAssignment, GenerationResult


def _column_labels() -> List[str]:
    return ["LUNCH" if s.is_lunch else s.label for s in TIME_SLOTS]


def assignments_to_dataframe(assignments: Sequence[GeneratedAssignment]) -> pd.DataFrame:
    data = [
        {
            "offering_id": a.offering_id,
            "teacher_id": a.teacher_id,
            "teacher_name": a.teacher_name,
            "section": a.section,
            "course_code": a.course_code,
            "course_name": a.course_name,
            "type": "Lab" if a.is_lab else "Theory",
            "day_of_week": a.day,
            "start_time": a.start_time,
            "end_time": a.end_time,
            "room": a.room,
            "slots": " ".join(str(i) for i in a.slot_indices),
        }
        for a in assignments
    ]
    columns = [
        "offering_id", "teacher_id", "teacher_name", "section", "course_code", "course_name",
        "type", "day_of_week", "start_time", "end_time", "room", "slots",
    ]
    return pd.DataFrame(data, columns=columns)


def _grid(assignments: Sequence[GeneratedAssignment], cell) -> pd.DataFrame:
    labels = _column_labels()
    df = pd.DataFrame("", index=list(DAYS), columns=labels)
    for day in DAYS:
        df.loc[day, "LUNCH"] = "LUNCH"
    for a in assignments:
        if a.day not in df.index:
            continue
        # lab blocks fill both of their periods
        for idx in a.slot_indices:
            df.loc[a.day, labels[idx]] = cell(a)
    df.index.name = "DAY/TIME"
    return df


def class_timetable_grid(assignments: Sequence[GeneratedAssignment]) -> pd.DataFrame:
    """Days x periods grid for the section, cells like "DS (Room 101)"."""
    return _grid(assignments, lambda a: f"{abbreviation(a.course_name)} ({a.room})")


def faculty_timetable_grid(workload: FacultyWorkload) -> pd.DataFrame:
    """Days x periods grid for one teacher, cells like "DS-A (Room 101)"."""
    flat = [a for day in DAYS for a in workload.day_schedule.get(day, [])]
    return _grid(flat, lambda a: f"{abbreviation(a.course_name)}-{a.section} ({a.room})")


def subject_legend(assignments: Sequence[GeneratedAssignment]) -> pd.DataFrame:
    """One row per (course code, lab/theory), first-seen order."""
    seen: Dict[str, dict] = {}
    for a in assignments:
        key = f"{a.course_code}-{'lab' if a.is_lab else 'theory'}"
        if key not in seen:
            seen[key] = {
                "abbreviation": abbreviation(a.course_name),
                "course_code": a.course_code,
                "course_name": a.course_name,
                "faculty": a.teacher_name,
                "type": "Lab" if a.is_lab else "Theory",
            }
    return pd.DataFrame(
        list(seen.values()),
        columns=["abbreviation", "course_code", "course_name", "faculty", "type"],
    )


def workloads_to_dataframe(workloads: Sequence[FacultyWorkload]) -> pd.DataFrame:
    data = []
    for wl in workloads:
        row = {
            "teacher_id": wl.teacher_id,
            "teacher_name": wl.teacher_name,
            "total_periods": wl.total_periods,
            "morning_periods": wl.morning_periods,
            "afternoon_periods": wl.afternoon_periods,
            "max_periods_per_day": wl.max_periods_per_day,
            "lightest_day": wl.lightest_day,
        }
        for day in DAYS:
            row[day] = wl.periods_per_day.get(day, 0)
        data.append(row)
    columns = [
        "teacher_id", "teacher_name", "total_periods", "morning_periods", "afternoon_periods",
        "max_periods_per_day", "lightest_day", *DAYS,
    ]
    return pd.DataFrame(data, columns=columns)


def export_outputs(result: GenerationResult, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    assignments_to_dataframe(result.assignments).to_csv(out_dir / "schedule.csv", index=False)
    class_timetable_grid(result.assignments).to_csv(out_dir / "class_timetable.csv")
    workloads_to_dataframe(result.workloads).to_csv(out_dir / "faculty_workload.csv", index=False)
    subject_legend(result.assignments).to_csv(out_dir / "subjects.csv", index=False)
    (out_dir / "justification.txt").write_text("\n".join(result.justification) + "\n", encoding="utf-8")
