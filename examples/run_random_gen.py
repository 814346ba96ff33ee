"""
Random Value Set Generator
==========================

Measures a recycled register many times and reports duplicate value sets
and zero frequencies, for both the equal (0.5) and the skewed (0.75)
superposition. Reports are saved as randgen_*.json for plot.py.

Usage:
    python examples/run_random_gen.py [size] [samples]
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vqbit.stats import run_measurements, verify_balance, ExperimentLogger


def main():
    size = int(sys.argv[1]) if len(sys.argv) > 1 else 64
    samples = int(sys.argv[2]) if len(sys.argv) > 2 else 100

    print("=" * 60)
    print("    VQBIT: Random Value Set Generator")
    print("=" * 60)
    print(f"   Register: {size} units")
    print(f"   Samples: {samples}")

    logger = ExperimentLogger(".")

    for equal in (True, False):
        label = "EQUAL SUPERPOSITION" if equal else "SKEWED SUPERPOSITION (0.75)"
        print(f"\n🎲 {label}...")
        report = run_measurements(size, samples, equal=equal)

        print(f"\n{report}")
        for later, earlier in report.duplicates[:5]:
            print(f"   Duplicate: {later} == {earlier}: {report.values[later]}")

        passed, msg = verify_balance(report)
        if passed:
            print(f"✅ {msg}")
        else:
            print(f"⚠️ {msg}")

        logger.log_report(report, name=f"randgen_{report.mode}")


if __name__ == "__main__":
    main()
