"""
Generator configuration.

Constraint knobs plus the room pools, keyword tables and seed, loadable from
YAML so runs are reproducible and tunable without code changes.
"""
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .grid import DEFAULT_LABS, DEFAULT_ROOMS, LIGHT_DAYS


DEFAULT_CORE_KEYWORDS: List[str] = [
    "Data Structures",
    "Algorithms",
    "Database",
    "Operating Systems",
    "Computer Networks",
    "Machine Learning",
    "Artificial Intelligence",
]

DEFAULT_LIGHT_KEYWORDS: List[str] = [
    "seminar",
    "soft skills",
    "mini project",
    "project work",
    "internship",
]


@dataclass
class ScheduleConstraints:
    # All soft: a violating candidate is skipped, never raised
    max_theory_per_faculty_per_day: int = 3
    max_continuous_theory: int = 2
    min_free_periods_per_faculty_per_day: int = 1
    max_periods_per_subject_per_day: int = 2
    prefer_labs_in_afternoon: bool = True
    avoid_theory_around_labs: bool = True
    distribute_workload_evenly: bool = True
    core_subjects_in_morning: bool = True
    light_subjects_on_light_days: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScheduleConstraints":
        merged = asdict(cls())
        for k, v in (data or {}).items():
            if k in merged:
                merged[k] = v
        return cls(**merged)


@dataclass
class GeneratorConfig:
    constraints: ScheduleConstraints = field(default_factory=ScheduleConstraints)
    seed: Optional[int] = 42

    rooms: List[str] = field(default_factory=lambda: list(DEFAULT_ROOMS))
    labs: List[str] = field(default_factory=lambda: list(DEFAULT_LABS))
    light_days: Tuple[str, ...] = LIGHT_DAYS
    core_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_CORE_KEYWORDS))
    light_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_LIGHT_KEYWORDS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorConfig":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for k, v in data.items():
            if k == "constraints":
                kwargs[k] = ScheduleConstraints.from_dict(v)
            elif k == "light_days":
                kwargs[k] = tuple(v)
            elif k in known:
                kwargs[k] = v
        return cls(**kwargs)


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: str = "config.yaml") -> GeneratorConfig:
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return GeneratorConfig.from_dict(data)
