import argparse
import random
import time
from pathlib import Path

from timetable.config import load_config
from timetable.data_loader import load_data
from timetable.engine import TimetableGenerator
from timetable.evaluation import audit_schedule
from timetable.export import class_timetable_grid, export_outputs


def print_summary(result, audit, elapsed):
    print("\n" + "=" * 80)
    print("GENERATED TIMETABLE")
    print("=" * 80)
    print(class_timetable_grid(result.assignments).to_string())
    print("=" * 80)
    for line in result.justification:
        print(line)
    print("=" * 80)
    for wl in result.workloads:
        print(
            f"{wl.teacher_name:<24} total={wl.total_periods:<3} "
            f"morning={wl.morning_periods:<3} afternoon={wl.afternoon_periods:<3} "
            f"max/day={wl.max_periods_per_day}"
        )
    print(f"\nAssignments: {len(result.assignments)} | Shortfalls: {sum(result.shortfalls.values())} | Time: {elapsed:.3f}s")
    if not audit.is_clean:
        print("Audit found violations:")
        for v in audit.violations:
            print(f"  - {v}")


def main():
    parser = argparse.ArgumentParser(description="Generate a weekly class timetable")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML configuration file")
    parser.add_argument("--data_dir", default="data", help="Directory with offerings.csv and existing_timetable.csv")
    parser.add_argument("--out", default="outputs", help="Directory for the generated CSV files")
    parser.add_argument("--seed", type=int, default=None, help="Override the seed from the config file")
    args = parser.parse_args()

    cfg = load_config(args.config)
    seed = args.seed if args.seed is not None else cfg.seed

    print("Loading data...")
    bundle = load_data(args.data_dir)
    print(f"Offerings: {len(bundle.offerings)} | Existing slots: {len(bundle.existing)} | Seed: {seed}")

    generator = TimetableGenerator(bundle.offerings, bundle.existing, config=cfg, rng=random.Random(seed))
    start = time.perf_counter()
    result = generator.generate()
    elapsed = time.perf_counter() - start

    audit = audit_schedule(result.assignments, generator.constraints)
    print_summary(result, audit, elapsed)

    out_dir = Path(args.out)
    export_outputs(result, out_dir)
    print(f"Results saved to {out_dir}/schedule.csv and {out_dir}/class_timetable.csv")


if __name__ == "__main__":
    main()
