"""
Gate Transition Walk
====================

Walks an even and an odd register lane through every composite gate
transition and prints each state, then checks that an entangled register
follows its source (even units same, odd units opposite).

Usage:
    python examples/run_gate_transitions.py
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vqbit.isa import OpCode
from vqbit.register import create_register
from vqbit.stats import check_entanglement, entanglement_holds


STEPS = [
    ("ESP", [OpCode.ESP]),
    ("JTS", [OpCode.JTS]),
    ("TSC", [OpCode.TSC]),
    ("TSC", [OpCode.TSC]),
    ("TSC + 1/2 turn + TSC", [OpCode.TSC, 1, OpCode.TSC]),
    ("JTS", [OpCode.JTS]),
]


def main():
    size = 8
    print("=" * 60)
    print("    VQBIT: Gate Transition Walk")
    print("=" * 60)

    reg = create_register(size)
    print(f"\n   Start: {reg.describe()}")

    for label, ops in STEPS:
        for i in range(size):
            for op in ops:
                if isinstance(op, int):
                    reg.shift_phase(i, op)
                else:
                    reg.apply(op, i)
            # Odd lanes run on the negative equal superposition
            if label == "ESP" and i % 2 == 1:
                reg.apply(OpCode.PZG, i)
        print(f"   {label:<22} {' '.join(reg.describe())}")

    print("\n🔗 ENTANGLEMENT CHECK...")
    first, second = check_entanglement(size)
    print(f"   First:  {first}")
    print(f"   Second: {second}")

    print("\n" + "-" * 60)
    if entanglement_holds(first, second):
        print("✅ Entangled units follow their source")
    else:
        print("❌ Entanglement broken")


if __name__ == "__main__":
    main()
