"""
Run a VQ-ISA Program
====================

Assembles a .vq program, runs it on a register, and exports the same
program as a qiskit circuit whose statevector is compared against the
unit probabilities. Finishes with a Quantum Fourier Transform.

Usage:
    python examples/run_program.py [program.vq] [size]
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qiskit.quantum_info import Statevector

from vqbit.compiler import load_program, CircuitCompiler
from vqbit.isa import OpCode
from vqbit.register import create_register, fourier_transform
from vqbit.sequencer import Sequencer


def main():
    script_dir = os.path.dirname(os.path.abspath(__file__))
    path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(script_dir, "opposite_pair.vq")
    size = int(sys.argv[2]) if len(sys.argv) > 2 else 3

    print("=" * 60)
    print("    VQBIT: Program Runner")
    print("=" * 60)

    # Assemble
    print(f"\n📝 ASSEMBLING {os.path.basename(path)}...")
    instructions = load_program(path)
    for instr in instructions:
        print(f"   {instr}")

    # Run on units
    print(f"\n🚀 RUNNING ON {size} UNITS...")
    reg = create_register(size)
    seq = Sequencer(instructions)
    result = seq.run(reg)
    for addr, bits in sorted(result.outcomes.items()):
        print(f"   Unit {addr}: {bits}")
    if result.rejected:
        print(f"   ⚠️ Rejected instructions: {result.rejected}")

    # Export
    print("\n🔧 COMPILING TO QISKIT...")
    compiler = CircuitCompiler(size)
    circuit = compiler.compile(instructions, measure=False)
    print(f"   Depth: {circuit.depth()}")
    print(f"   Ops: {dict(circuit.count_ops())}")

    unitary_only = [i for i in instructions
                    if i.opcode not in (OpCode.ENTANGLE, OpCode.SHIFT, OpCode.MEASURE)]
    shadow = create_register(size, settle=0)
    Sequencer(unitary_only).run(shadow)
    state = Statevector.from_instruction(
        CircuitCompiler(size).compile(unitary_only, measure=False)
    )
    print("\n📊 P(0) PER UNIT (units vs statevector):")
    for q in range(size):
        print(f"   {q}: {shadow[q].probability_of_zero:.4f} vs {state.probabilities([q])[0]:.4f}")

    # Fourier transform
    values = [1, 0, 1, 1]
    print(f"\n🌀 QUANTUM FOURIER TRANSFORM of {values}...")
    qft = fourier_transform(values)
    for unit, phase in zip(qft, qft.phases()):
        print(f"   {unit.ket():<14} {phase}")


if __name__ == "__main__":
    main()
