import random
import unittest
from collections import defaultdict

from timetable.config import GeneratorConfig, ScheduleConstraints
from timetable.engine import TimetableGenerator, generate_timetable
from timetable.evaluation import audit_schedule
from timetable.grid import AFTERNOON_LAB_PAIRS, DAYS, LUNCH_INDEX, MORNING_LAB_PAIRS
from timetable.model import ClassOffering, OccupiedSlot


def offering(oid, name, teacher="t1", is_lab=False, sessions=3, code=None, teacher_name="Dr. Rao"):
    return ClassOffering(oid, teacher, "A", is_lab, sessions, name, code or oid.upper(), teacher_name)


def sample_offerings():
    return [
        offering("ds", "Data Structures", "t1", code="CS301"),
        offering("ds-lab", "Data Structures", "t1", is_lab=True, sessions=1, code="CS301"),
        offering("os", "Operating Systems", "t2", code="CS302", teacher_name="Prof. Iyer"),
        offering("os-lab", "Operating Systems", "t2", is_lab=True, sessions=2, code="CS302", teacher_name="Prof. Iyer"),
        offering("cn", "Computer Networks", "t3", sessions=4, code="CS303", teacher_name="Dr. Sen"),
        offering("ps", "Probability and Statistics", "t4", sessions=4, code="MA301", teacher_name="Dr. Nair"),
        offering("se", "Software Engineering", "t1", code="CS304"),
        offering("sem", "Technical Seminar", "t5", sessions=1, code="HS301", teacher_name="Ms. Das"),
        offering("ss", "Soft Skills", "t5", sessions=2, code="HS302", teacher_name="Ms. Das"),
        offering("ml-lab", "Machine Learning", "t3", is_lab=True, sessions=1, code="CS305", teacher_name="Dr. Sen"),
    ]


def all_day(day):
    return OccupiedSlot(day, "09:15", "15:55")


class LabPlacementTests(unittest.TestCase):
    def test_single_lab_goes_to_afternoon_pair(self):
        result = generate_timetable([offering("l1", "Data Structures", is_lab=True, sessions=1)], seed=3)
        self.assertEqual(len(result.assignments), 1)
        lab = result.assignments[0]
        self.assertTrue(lab.is_lab)
        self.assertIn(lab.slot_indices, AFTERNOON_LAB_PAIRS)
        self.assertEqual(lab.room, "Lab 1")
        self.assertEqual(lab.course_name, "Data Structures LAB")
        self.assertEqual(lab.course_code, "L1-LAB")
        if lab.slot_indices == (5, 6):
            self.assertEqual((lab.start_time, lab.end_time), ("13:25", "15:05"))
        else:
            self.assertEqual((lab.start_time, lab.end_time), ("14:15", "15:55"))

    def test_morning_labs_when_afternoon_not_preferred(self):
        cons = ScheduleConstraints(prefer_labs_in_afternoon=False)
        result = generate_timetable([offering("l1", "Networks", is_lab=True, sessions=1)], constraints=cons, seed=3)
        self.assertIn(result.assignments[0].slot_indices, MORNING_LAB_PAIRS)

    def test_blocked_afternoons_fall_back_to_morning(self):
        existing = [OccupiedSlot(day, "14:15", "15:05") for day in DAYS]
        result = generate_timetable([offering("l1", "Networks", is_lab=True, sessions=2)], existing, seed=11)
        self.assertEqual(len(result.assignments), 2)
        for a in result.assignments:
            self.assertIn(a.slot_indices, MORNING_LAB_PAIRS)

    def test_one_block_per_day(self):
        result = generate_timetable([offering("l1", "Networks", is_lab=True, sessions=3)], seed=5)
        days = [a.day for a in result.assignments]
        self.assertEqual(len(days), 3)
        self.assertEqual(len(set(days)), 3)


class TheoryPlacementTests(unittest.TestCase):
    def test_core_subject_in_morning(self):
        result = generate_timetable([offering("c1", "Data Structures", sessions=3)], seed=1)
        self.assertEqual(len(result.assignments), 3)
        per_day = defaultdict(int)
        for a in result.assignments:
            self.assertLessEqual(a.slot_indices[0], 3)
            self.assertEqual(len(a.slot_indices), 1)
            self.assertEqual(a.room, "Room 101")
            per_day[a.day] += 1
        self.assertTrue(all(n <= 2 for n in per_day.values()))

    def test_light_subject_on_light_day(self):
        result = generate_timetable([offering("s1", "Seminar", sessions=1)], seed=9)
        self.assertEqual(len(result.assignments), 1)
        self.assertIn(result.assignments[0].day, ("Friday", "Saturday"))

    def test_light_subject_moves_to_saturday_when_friday_is_full(self):
        result = generate_timetable([offering("s1", "Seminar", sessions=1)], [all_day("Friday")], seed=9)
        self.assertEqual(result.assignments[0].day, "Saturday")

    def test_existing_timetable_is_respected(self):
        existing = [all_day("Monday"), OccupiedSlot("Tuesday", "09:15", "12:45")]
        offers = [offering("r1", "Compiler Design", sessions=6), offering("c1", "Algorithms", "t2", sessions=6)]
        result = generate_timetable(offers, existing, seed=4)
        self.assertTrue(result.assignments)
        for a in result.assignments:
            self.assertNotEqual(a.day, "Monday")
            if a.day == "Tuesday":
                self.assertGreaterEqual(a.slot_indices[0], 5)

    def test_no_theory_next_to_own_lab(self):
        offers = [
            offering("l1", "Data Structures", is_lab=True, sessions=2),
            offering("r1", "Compiler Design", sessions=6),
        ]
        for seed in range(5):
            result = generate_timetable(offers, seed=seed)
            labs = defaultdict(set)
            for a in result.assignments:
                if a.is_lab:
                    labs[a.day].update(a.slot_indices)
            for a in result.assignments:
                if a.is_lab:
                    continue
                for idx in labs[a.day]:
                    self.assertGreater(abs(a.slot_indices[0] - idx), 1)

    def test_faculty_limits(self):
        cons = ScheduleConstraints()
        offers = [
            offering("c1", "Algorithms", sessions=6),
            offering("r1", "Compiler Design", sessions=6),
            offering("r2", "Graph Theory", sessions=6),
        ]
        result = generate_timetable(offers, constraints=cons, seed=2)
        per_day = defaultdict(list)
        for a in result.assignments:
            per_day[a.day].extend(a.slot_indices)
        for day, slots in per_day.items():
            self.assertLessEqual(len(slots), cons.max_theory_per_faculty_per_day)
            self.assertEqual(len(slots), len(set(slots)))
            self.assertNotIn(LUNCH_INDEX, slots)


class ShortfallTests(unittest.TestCase):
    def test_saturated_teacher_reports_shortfall(self):
        cons = ScheduleConstraints(max_theory_per_faculty_per_day=1, max_periods_per_subject_per_day=1)
        offers = [
            offering("filler", "Discrete Mathematics", sessions=6),
            offering("c2", "Compiler Design", sessions=2),
        ]
        result = generate_timetable(offers, constraints=cons, seed=0)
        self.assertEqual(result.assigned.get("filler"), 6)
        self.assertEqual(len({a.day for a in result.assignments}), 6)
        self.assertNotIn("c2", result.assigned)
        self.assertEqual(result.shortfalls, {"c2": 2})
        notes = [line for line in result.justification if "Could only assign 0/2" in line]
        self.assertEqual(len(notes), 1)
        self.assertIn("Compiler Design", notes[0])

    def test_zero_sessions_noted(self):
        result = generate_timetable([offering("z1", "Compiler Design", sessions=0)], seed=0)
        self.assertEqual(result.assignments, [])
        self.assertTrue(any("No sessions requested for Compiler Design" in line for line in result.justification))
        self.assertEqual(result.shortfalls, {})

    def test_lab_shortfall_uses_lab_label(self):
        existing = [all_day(day) for day in DAYS]
        result = generate_timetable([offering("l1", "Networks", is_lab=True, sessions=1)], existing, seed=0)
        self.assertEqual(result.assignments, [])
        self.assertTrue(any("0/1 sessions for Networks LAB" in line for line in result.justification))

    def test_missing_rooms_leave_offering_short(self):
        cfg = GeneratorConfig(rooms=[])
        result = generate_timetable([offering("r1", "Compiler Design", sessions=2)], config=cfg, seed=0)
        self.assertEqual(result.assignments, [])
        self.assertEqual(result.shortfalls, {"r1": 2})


class ConstraintSwitchTests(unittest.TestCase):
    def _days(self, result, oid):
        return [a.day for a in result.assignments if a.offering_id == oid]

    def test_even_distribution_prefers_lightest_days(self):
        # the seminar pre-loads the teacher on Monday to Wednesday
        cfg = GeneratorConfig(light_days=("Monday", "Tuesday", "Wednesday"))
        offers = [offering("sem", "Seminar", sessions=3), offering("cd", "Compiler Design", sessions=3)]

        balanced = ScheduleConstraints(max_periods_per_subject_per_day=1)
        for seed in range(10):
            result = generate_timetable(offers, constraints=balanced, config=cfg, seed=seed)
            self.assertEqual(set(self._days(result, "sem")), {"Monday", "Tuesday", "Wednesday"})
            self.assertEqual(set(self._days(result, "cd")), {"Thursday", "Friday", "Saturday"})

        shuffled = ScheduleConstraints(max_periods_per_subject_per_day=1, distribute_workload_evenly=False)
        busy_days = set()
        for seed in range(20):
            result = generate_timetable(offers, constraints=shuffled, config=cfg, seed=seed)
            self.assertEqual(len(self._days(result, "cd")), 3)
            busy_days.update(d for d in self._days(result, "cd") if d in ("Monday", "Tuesday", "Wednesday"))
        self.assertTrue(busy_days)

    def test_min_free_periods_skips_loaded_days(self):
        cfg = GeneratorConfig(light_days=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday"))
        offers = [offering("sem", "Seminar", sessions=5), offering("cd", "Compiler Design", sessions=3)]

        strict = ScheduleConstraints(min_free_periods_per_faculty_per_day=6, max_periods_per_subject_per_day=1)
        result = generate_timetable(offers, constraints=strict, config=cfg, seed=0)
        self.assertEqual(self._days(result, "sem"), ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"])
        self.assertEqual(self._days(result, "cd"), ["Saturday"])
        self.assertEqual(result.shortfalls, {"cd": 2})

        relaxed = ScheduleConstraints(max_periods_per_subject_per_day=1)
        result = generate_timetable(offers, constraints=relaxed, config=cfg, seed=0)
        self.assertEqual(len(self._days(result, "cd")), 3)

    def test_core_without_morning_flag_keeps_clock_order(self):
        offers = [offering("c1", "Data Structures", sessions=3)]
        off = generate_timetable(offers, constraints=ScheduleConstraints(core_subjects_in_morning=False), seed=4)
        on = generate_timetable(offers, constraints=ScheduleConstraints(), seed=4)
        self.assertEqual(off.assignments, on.assignments)
        self.assertTrue(all(a.slot_indices[0] <= 3 for a in off.assignments))

    def test_light_days_flag_off_uses_any_day(self):
        cons = ScheduleConstraints(light_subjects_on_light_days=False)
        days = set()
        for seed in range(20):
            result = generate_timetable([offering("s1", "Seminar", sessions=1)], constraints=cons, seed=seed)
            self.assertEqual(len(result.assignments), 1)
            days.add(result.assignments[0].day)
        self.assertTrue(days - {"Friday", "Saturday"})

    def test_light_subject_shares_light_days_with_other_teachers(self):
        offers = [
            offering("ss", "Soft Skills", "t2", sessions=4),
            offering("mp", "Mini Project", "t3", sessions=4),
            offering("sem", "Seminar", "t1", sessions=1),
        ]
        result = generate_timetable(offers, seed=12)
        others = {a.day for a in result.assignments if a.teacher_id != "t1"}
        self.assertEqual(others, {"Friday", "Saturday"})
        self.assertIn(self._days(result, "sem")[0], ("Friday", "Saturday"))

    def test_theory_next_to_lab_when_adjacency_allowed(self):
        # only Monday afternoon is free: the theory period must touch the lab block
        existing = [all_day(day) for day in DAYS if day != "Monday"]
        existing.append(OccupiedSlot("Monday", "09:15", "12:45"))
        offers = [
            offering("l1", "Data Structures", is_lab=True, sessions=1),
            offering("cd", "Compiler Design", sessions=1),
        ]

        cons = ScheduleConstraints(avoid_theory_around_labs=False, max_continuous_theory=3)
        result = generate_timetable(offers, existing, constraints=cons, seed=2)
        lab = [a for a in result.assignments if a.is_lab][0]
        theory = [a for a in result.assignments if not a.is_lab]
        self.assertEqual(len(theory), 1)
        self.assertEqual(theory[0].day, "Monday")
        self.assertEqual(min(abs(theory[0].slot_indices[0] - i) for i in lab.slot_indices), 1)

        cons = ScheduleConstraints(avoid_theory_around_labs=True, max_continuous_theory=3)
        result = generate_timetable(offers, existing, constraints=cons, seed=2)
        self.assertEqual(result.shortfalls, {"cd": 1})

    def test_core_pass_runs_before_regular(self):
        # one free period in the whole week
        existing = [all_day(day) for day in DAYS if day != "Monday"]
        existing.append(OccupiedSlot("Monday", "10:05", "15:55"))
        offers = [
            offering("cd", "Compiler Design", "t2", sessions=1),
            offering("ds", "Data Structures", "t1", sessions=1),
        ]
        result = generate_timetable(offers, existing, seed=0)
        self.assertEqual([a.offering_id for a in result.assignments], ["ds"])
        self.assertEqual(result.assignments[0].slot_indices, (0,))
        self.assertEqual(result.shortfalls, {"cd": 1})


class GeneratorTests(unittest.TestCase):
    def test_sample_schedule_passes_audit(self):
        cons = ScheduleConstraints()
        for seed in range(10):
            result = generate_timetable(sample_offerings(), constraints=cons, seed=seed)
            audit = audit_schedule(result.assignments, cons)
            self.assertTrue(audit.is_clean, msg=f"seed {seed}: {audit.violations}")

            # section grid: one class per slot
            taken = set()
            for a in result.assignments:
                for idx in a.slot_indices:
                    self.assertNotIn((a.day, idx), taken)
                    taken.add((a.day, idx))
            self.assertEqual(sum(result.assigned.values()), len(result.assignments))

    def test_same_seed_same_timetable(self):
        first = generate_timetable(sample_offerings(), seed=21)
        second = generate_timetable(sample_offerings(), seed=21)
        self.assertEqual(first.assignments, second.assignments)
        self.assertEqual(first.justification, second.justification)

    def test_injected_rng(self):
        a = TimetableGenerator(sample_offerings(), rng=random.Random(8)).generate()
        b = TimetableGenerator(sample_offerings(), rng=random.Random(8)).generate()
        self.assertEqual(a.assignments, b.assignments)

    def test_each_run_starts_from_fresh_trackers(self):
        offers = [offering("c1", "Algorithms", sessions=3), offering("l1", "Algorithms", is_lab=True, sessions=1)]
        gen = TimetableGenerator(offers, rng=random.Random(1))
        first = gen.generate()
        second = gen.generate()
        self.assertEqual(first.shortfalls, {})
        self.assertEqual(second.shortfalls, {})
        self.assertEqual(len(second.assignments), 4)

    def test_justification_summary(self):
        result = generate_timetable(sample_offerings(), seed=0)
        lines = result.justification
        self.assertEqual(lines[0], "📚 Identified 3 core subjects for morning priority")
        self.assertEqual(lines[1], "📝 Identified 2 light subjects for Friday/Saturday preference")
        self.assertEqual(lines[2], "🔬 Scheduling 3 lab sessions in afternoon slots")
        self.assertEqual(lines[-1], f"✅ Generated {len(result.assignments)} total time slots")

    def test_workloads_follow_assignments(self):
        result = generate_timetable(sample_offerings(), seed=6)
        by_teacher = defaultdict(int)
        for a in result.assignments:
            by_teacher[a.teacher_id] += a.periods
        self.assertEqual({wl.teacher_id: wl.total_periods for wl in result.workloads}, dict(by_teacher))
        for wl in result.workloads:
            self.assertEqual(wl.morning_periods + wl.afternoon_periods, wl.total_periods)
            self.assertEqual(sum(wl.periods_per_day.values()), wl.total_periods)
            self.assertIn(wl.lightest_day, DAYS)


if __name__ == "__main__":
    unittest.main()
