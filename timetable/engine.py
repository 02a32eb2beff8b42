"""
Greedy weekly timetable generator.

Offerings are placed in a fixed priority order (labs, core theory, light
theory, regular theory). Each placement consults the slot, faculty, room and
subject trackers and commits to all four at once. Nothing is ever undone:
an offering that cannot reach its weekly target is reported as a shortfall.
"""
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .classification import CORE, LAB, LIGHT, partition_offerings
from .config import GeneratorConfig, ScheduleConstraints
from .grid import DAYS, TIME_SLOTS
from .model import ClassOffering, GeneratedAssignment, GenerationResult, OccupiedSlot
from .trackers import FacultyTracker, RoomTracker, SlotTracker, SubjectTracker
from .workload import build_faculty_workloads, workload_justification


@dataclass
class RunState:
    """Trackers and output for a single generate() call."""

    slots: SlotTracker = field(default_factory=SlotTracker)
    faculty: FacultyTracker = field(default_factory=FacultyTracker)
    rooms: RoomTracker = field(default_factory=RoomTracker)
    subjects: SubjectTracker = field(default_factory=SubjectTracker)
    schedule: List[GeneratedAssignment] = field(default_factory=list)
    justification: List[str] = field(default_factory=list)
    assigned: Dict[str, int] = field(default_factory=dict)


class TimetableGenerator:
    def __init__(
        self,
        offerings: Sequence[ClassOffering],
        existing: Optional[Iterable[OccupiedSlot]] = None,
        constraints: Optional[ScheduleConstraints] = None,
        config: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.offerings = list(offerings)
        self.existing = list(existing or [])
        self.config = config or GeneratorConfig()
        self.constraints = constraints or self.config.constraints
        self.rng = rng or random.Random(self.config.seed)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def generate(self) -> GenerationResult:
        state = RunState()
        state.slots.mark_existing(self.existing)
        cons = self.constraints

        part = partition_offerings(self.offerings, self.config.core_keywords, self.config.light_keywords)
        light_days = "/".join(self.config.light_days)
        session = "afternoon" if cons.prefer_labs_in_afternoon else "available"
        state.justification.append(f"📚 Identified {len(part.core)} core subjects for morning priority")
        state.justification.append(f"📝 Identified {len(part.light)} light subjects for {light_days} preference")
        state.justification.append(f"🔬 Scheduling {len(part.labs)} lab sessions in {session} slots")

        for category, group in part.passes():
            for off in group:
                if category == LAB:
                    got = self._schedule_lab(state, off)
                    self._note_shortfall(state, off, got, f"{off.display_name} LAB")
                else:
                    got = self._schedule_theory(state, off, category)
                    self._note_shortfall(state, off, got, off.display_name)

            if category == LAB:
                state.justification.append(f"✅ Labs scheduled in {session} slots with 2 consecutive periods")
            elif category == CORE:
                state.justification.append("✅ Core subjects prioritized for morning sessions")
            elif category == LIGHT and group:
                state.justification.append(f"✅ Light subjects (seminar, soft skills) placed on {light_days}")

        workloads = build_faculty_workloads(state.schedule)
        state.justification.extend(workload_justification(workloads, state.schedule, cons))

        return GenerationResult(
            assignments=state.schedule,
            workloads=workloads,
            justification=state.justification,
            requested={o.id: o.sessions_per_week for o in self.offerings},
            assigned=state.assigned,
        )

    # ------------------------------------------------------------------ #
    # Labs
    # ------------------------------------------------------------------ #
    def _schedule_lab(self, state: RunState, lab: ClassOffering) -> int:
        cons = self.constraints
        assigned = 0
        days = list(DAYS)
        self.rng.shuffle(days)

        for day in days:
            if assigned >= lab.sessions_per_week:
                break
            for pair in state.slots.lab_pairs(day, cons.prefer_labs_in_afternoon, self.rng):
                if not state.faculty.can_assign(lab.teacher_id, day, pair, True, cons):
                    continue
                if not state.subjects.can_assign(lab.id, day, 2, cons.max_periods_per_subject_per_day):
                    continue
                room = state.rooms.first_available(self.config.labs, day, pair)
                if room is None:
                    continue
                self._commit(state, lab, day, pair, room)
                assigned += 1
                # one lab block per offering per day
                break
        return assigned

    # ------------------------------------------------------------------ #
    # Theory
    # ------------------------------------------------------------------ #
    def _day_order(self, state: RunState, off: ClassOffering, category: str) -> List[str]:
        cons = self.constraints
        if category == LIGHT and cons.light_subjects_on_light_days:
            preferred = [d for d in DAYS if d in self.config.light_days]
            days = preferred + [d for d in DAYS if d not in preferred]
        else:
            days = list(DAYS)
            self.rng.shuffle(days)
        if cons.distribute_workload_evenly:
            # sorted() is stable: equal loads keep the order above
            days = sorted(days, key=lambda d: state.faculty.periods_on(off.teacher_id, d))
        return days

    def _candidate_slots(self, state: RunState, off: ClassOffering, day: str, category: str) -> List[int]:
        cons = self.constraints
        if category == CORE and cons.core_subjects_in_morning:
            candidates = state.slots.available_slots(day, "morning") + state.slots.available_slots(day, "afternoon")
        else:
            candidates = state.slots.available_slots(day)

        if cons.avoid_theory_around_labs:
            lab_slots = [
                idx
                for a in state.schedule
                if a.is_lab and a.day == day and a.teacher_id == off.teacher_id
                for idx in a.slot_indices
            ]
            candidates = [c for c in candidates if all(abs(c - lab_idx) > 1 for lab_idx in lab_slots)]
        return candidates

    def _schedule_theory(self, state: RunState, off: ClassOffering, category: str) -> int:
        cons = self.constraints
        cap = cons.max_periods_per_subject_per_day
        assigned = 0

        for day in self._day_order(state, off, category):
            if assigned >= off.sessions_per_week:
                break
            # at least the minimum free periods must remain after this placement
            if state.faculty.free_periods(off.teacher_id, day) < cons.min_free_periods_per_faculty_per_day + 1:
                continue
            if not state.subjects.can_assign(off.id, day, 1, cap):
                continue

            for idx in self._candidate_slots(state, off, day, category):
                if assigned >= off.sessions_per_week:
                    break
                if not state.subjects.can_assign(off.id, day, 1, cap):
                    break
                if not state.faculty.can_assign(off.teacher_id, day, [idx], False, cons):
                    continue
                room = state.rooms.first_available(self.config.rooms, day, [idx])
                if room is None:
                    continue
                self._commit(state, off, day, (idx,), room)
                assigned += 1
        return assigned

    # ------------------------------------------------------------------ #
    # Commit / reporting
    # ------------------------------------------------------------------ #
    def _commit(self, state: RunState, off: ClassOffering, day: str, indices, room: str) -> None:
        indices = tuple(indices)
        state.slots.mark_used(day, indices)
        state.faculty.assign(off.teacher_id, day, indices, off.is_lab)
        state.rooms.assign(room, day, indices)
        state.subjects.assign(off.id, day, indices)

        name = f"{off.display_name} LAB" if off.is_lab else off.display_name
        code = f"{off.display_code}-LAB" if off.is_lab else off.display_code
        state.schedule.append(
            GeneratedAssignment(
                offering_id=off.id,
                teacher_id=off.teacher_id,
                day=day,
                start_time=TIME_SLOTS[indices[0]].start,
                end_time=TIME_SLOTS[indices[-1]].end,
                room=room,
                slot_indices=indices,
                course_name=name,
                course_code=code,
                section=off.section,
                teacher_name=off.display_teacher,
                is_lab=off.is_lab,
            )
        )
        state.assigned[off.id] = state.assigned.get(off.id, 0) + 1

    def _note_shortfall(self, state: RunState, off: ClassOffering, got: int, label: str) -> None:
        if off.sessions_per_week <= 0:
            state.justification.append(f"⚠️ No sessions requested for {label} ({off.sessions_per_week}/week)")
            return
        if got >= off.sessions_per_week:
            return
        hint = state.faculty.least_loaded_day(off.teacher_id)
        state.justification.append(
            f"⚠️ Could only assign {got}/{off.sessions_per_week} sessions for {label}"
            f" (lightest day for {off.display_teacher}: {hint})"
        )


def generate_timetable(
    offerings: Sequence[ClassOffering],
    existing: Optional[Iterable[OccupiedSlot]] = None,
    constraints: Optional[ScheduleConstraints] = None,
    config: Optional[GeneratorConfig] = None,
    seed: Optional[int] = None,
) -> GenerationResult:
    """One-shot helper: fresh generator, fresh trackers, one result."""
    rng = random.Random(seed) if seed is not None else None
    return TimetableGenerator(offerings, existing, constraints, config, rng).generate()
