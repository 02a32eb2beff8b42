# timetable/model.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Day = str
SlotIdx = int


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str
    label: str
    index: SlotIdx
    period: int        # 0 = lunch
    session: str       # "morning", "afternoon", "lunch"

    @property
    def is_lunch(self) -> bool:
        return self.session == "lunch"


@dataclass(frozen=True)
class ClassOffering:
    # one row per (course, teacher, section) to place in this run
    id: str
    teacher_id: str
    section: str
    is_lab: bool
    sessions_per_week: int
    course_name: Optional[str] = None
    course_code: Optional[str] = None
    teacher_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.course_name or "Unknown"

    @property
    def display_code(self) -> str:
        return self.course_code or "---"

    @property
    def display_teacher(self) -> str:
        return self.teacher_name or "TBA"


@dataclass(frozen=True)
class OccupiedSlot:
    day: Day
    start_time: str
    end_time: str


@dataclass(frozen=True)
class GeneratedAssignment:
    offering_id: str
    teacher_id: str
    day: Day
    start_time: str
    end_time: str
    room: str
    slot_indices: Tuple[SlotIdx, ...]
    course_name: str
    course_code: str
    section: str
    teacher_name: str
    is_lab: bool

    @property
    def periods(self) -> int:
        return len(self.slot_indices)


@dataclass
class FacultyWorkload:
    teacher_id: str
    teacher_name: str
    total_periods: int = 0
    morning_periods: int = 0
    afternoon_periods: int = 0
    periods_per_day: Dict[Day, int] = field(default_factory=dict)
    day_schedule: Dict[Day, List[GeneratedAssignment]] = field(default_factory=dict)
    lightest_day: Optional[Day] = None

    @property
    def max_periods_per_day(self) -> int:
        return max(self.periods_per_day.values(), default=0)


@dataclass
class GenerationResult:
    assignments: List[GeneratedAssignment]
    workloads: List[FacultyWorkload]
    justification: List[str]
    requested: Dict[str, int] = field(default_factory=dict)
    assigned: Dict[str, int] = field(default_factory=dict)

    @property
    def shortfalls(self) -> Dict[str, int]:
        """offering_id -> sessions that could not be placed."""
        return {
            oid: want - self.assigned.get(oid, 0)
            for oid, want in self.requested.items()
            if self.assigned.get(oid, 0) < want
        }
