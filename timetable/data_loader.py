# timetable/data_loader.py
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from .model import ClassOffering, OccupiedSlot

OFFERING_COLUMNS = ["id", "teacher_id", "section", "is_lab"]
OPTIONAL_OFFERING_COLUMNS = ["sessions_per_week", "course_name", "course_code", "teacher_name"]
EXISTING_COLUMNS = ["day_of_week", "start_time", "end_time"]

_TRUTHY = {"1", "true", "yes", "y", "t", "lab", "l"}


@dataclass(frozen=True)
class DataBundle:
    offerings: List[ClassOffering]
    existing: List[OccupiedSlot]


def _require(df: pd.DataFrame, columns: List[str], source: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{source} is missing columns: {', '.join(missing)}")


def _text(value):
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    if pd.isna(value):
        return False
    return str(value).strip().lower() in _TRUTHY


def offerings_from_dataframe(df: pd.DataFrame, source: str = "offerings") -> List[ClassOffering]:
    _require(df, OFFERING_COLUMNS, source)
    offerings: List[ClassOffering] = []
    for _, r in df.iterrows():
        is_lab = _flag(r["is_lab"])
        sessions = r.get("sessions_per_week")
        # defaults match the manual entry form: 3 theory sessions, 1 lab block
        sessions = (1 if is_lab else 3) if sessions is None or pd.isna(sessions) else int(sessions)
        offerings.append(
            ClassOffering(
                id=str(r["id"]).strip(),
                teacher_id=str(r["teacher_id"]).strip(),
                section=_text(r["section"]) or "",
                is_lab=is_lab,
                sessions_per_week=sessions,
                course_name=_text(r.get("course_name")),
                course_code=_text(r.get("course_code")),
                teacher_name=_text(r.get("teacher_name")),
            )
        )
    return offerings


def existing_from_dataframe(df: pd.DataFrame, source: str = "existing timetable") -> List[OccupiedSlot]:
    _require(df, EXISTING_COLUMNS, source)
    rows = df.dropna(subset=["day_of_week", "start_time"])
    return [
        OccupiedSlot(
            day=str(r["day_of_week"]).strip().capitalize(),
            start_time=str(r["start_time"]).strip(),
            end_time=_text(r["end_time"]) or "",
        )
        for _, r in rows.iterrows()
    ]


def load_offerings(path: str) -> List[ClassOffering]:
    return offerings_from_dataframe(pd.read_csv(path, dtype=str), source=str(path))


def load_existing_timetable(path: str) -> List[OccupiedSlot]:
    if not Path(path).exists():
        return []
    return existing_from_dataframe(pd.read_csv(path, dtype=str), source=str(path))


def load_frames(data_dir: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Raw input tables with every cell as text; empty tables for missing files."""
    base = Path(data_dir)
    frames = []
    for name, columns in (
        ("offerings.csv", OFFERING_COLUMNS + OPTIONAL_OFFERING_COLUMNS),
        ("existing_timetable.csv", EXISTING_COLUMNS),
    ):
        path = base / name
        frames.append(pd.read_csv(path, dtype=str) if path.exists() else pd.DataFrame(columns=columns))
    return frames[0], frames[1]


def load_data(data_dir: str) -> DataBundle:
    return DataBundle(
        offerings=load_offerings(f"{data_dir}/offerings.csv"),
        existing=load_existing_timetable(f"{data_dir}/existing_timetable.csv"),
    )
