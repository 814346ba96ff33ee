"""
VQBit: Virtual Quantum-Bit Register Simulator
=============================================

A small simulator of qubit-like units with a fixed gate set, exact
relative-phase tracking, pairwise entanglement and randomized collapse.

Core Components:
    - isa: constants, opcodes and instructions
    - amplitude: validated (a, b) ket
    - phase: exact dyadic phase accumulator
    - gates: fixed matrices and JTS/TSC lookup tables
    - measurer: pluggable collapse randomness
    - unit: the Unit state machine

Register Tooling:
    - register: Register of Units, Quantum Fourier Transform
    - sequencer: instruction programs run on a Register
    - compiler: text assembly and qiskit circuit export
    - stats: randomness / duplicate / entanglement statistics

Example:
    >>> from vqbit import Register, OpCode
    >>>
    >>> reg = Register(2, settle=0)
    >>> reg.apply(OpCode.ESP, 0)
    True
    >>> reg.entangle(1, 0, same=False)
    True
    >>> a, b = reg.measure_all()
    >>> a != b
    True
"""

from .isa import (
    UnitConstants,
    BasisState,
    OpCode,
    Instruction,
    settle_delay,
)

from .amplitude import AmplitudePair
from .phase import PhaseAccumulator

from .measurer import (
    Measurer,
    TimingJitterMeasurer,
    UniformMeasurer,
    Draw,
    outcome_for,
)

from .unit import (
    Unit,
    new_unit,
)

from .register import (
    Register,
    AddressError,
    create_register,
    fourier_transform,
)

from .sequencer import (
    Sequencer,
    SequenceResult,
    SequenceError,
    quick_sequence,
)

from .compiler import (
    GateAssembler,
    CircuitCompiler,
    assemble,
    compile_program,
)

from .stats import (
    ValueSet,
    RandomGenReport,
    ExperimentLogger,
    run_measurements,
    check_entanglement,
    verify_balance,
)

__version__ = "1.0.0"
__all__ = [
    # ISA
    "UnitConstants",
    "BasisState",
    "OpCode",
    "Instruction",
    "settle_delay",
    # Core
    "AmplitudePair",
    "PhaseAccumulator",
    "Measurer",
    "TimingJitterMeasurer",
    "UniformMeasurer",
    "Draw",
    "outcome_for",
    "Unit",
    "new_unit",
    # Register
    "Register",
    "AddressError",
    "create_register",
    "fourier_transform",
    "Sequencer",
    "SequenceResult",
    "SequenceError",
    "quick_sequence",
    # Compiler
    "GateAssembler",
    "CircuitCompiler",
    "assemble",
    "compile_program",
    # Statistics
    "ValueSet",
    "RandomGenReport",
    "ExperimentLogger",
    "run_measurements",
    "check_entanglement",
    "verify_balance",
]
