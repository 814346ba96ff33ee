"""
VQ-ISA: Virtual Qubit Instruction Set
=====================================

Constants, opcodes and instructions shared by the whole VQBit stack.

Key Concepts:
    - Each Unit holds a ket (a, b) whose squared magnitudes are snapped to
      the fixed set {0, 0.25, 0.5, 0.75, 1}
    - Basis 0 is the ket (1, 0), basis 1 is (0, 1), basis -1 is (0, -1)
    - Relative phase is tracked as an exact dyadic fraction of a full turn
"""

import os
import logging
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import List, Any, Dict


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# =============================================================================
# UNIT CONSTANTS (The Magic Numbers)
# =============================================================================

class UnitConstants:
    """
    Fixed parameters of the simulator.

    The magnitude set is closed under the gate set:
        ESP  moves 0/1   <-> 0.5
        JTS  moves 0.5   <-> 0.75/0.25
        TSC  moves 0.75/0.25 <-> 0/1
    """

    # Snap tolerance for squared magnitudes
    EPSILON: float = 1e-5

    # Supported probabilities of measuring 0
    MAGNITUDES = (0.0, 0.25, 0.5, 0.75, 1.0)
    INVALID_MAGNITUDE: float = -1.0

    # Register bounds (phase slots are sized to the register)
    MIN_REGISTER_SIZE: int = 1
    MAX_REGISTER_SIZE: int = 100

    # Measurement folding
    MEASURE_PERIOD: int = 32         # residue period
    SEED_RANGE: int = 1_000_000      # first draw of a fresh unit
    INDEX_OFFSET: int = 3            # retained * ticks // (index + 3)
    RETAINED_MASK: int = (1 << 63) - 1

    # Clock desync pause at construction (seconds)
    SETTLE_DELAY: float = (MEASURE_PERIOD + 1) / 1000.0


def settle_delay() -> float:
    """
    Construction pause in seconds.

    Priority:
        1. VQBIT_SETTLE_MS environment variable (milliseconds)
        2. UnitConstants.SETTLE_DELAY
    """
    raw = os.environ.get("VQBIT_SETTLE_MS")
    if raw:
        try:
            return max(float(raw), 0.0) / 1000.0
        except ValueError:
            logger.warning(
                f"⚠️ VQBIT_SETTLE_MS={raw!r} is not a number, "
                f"using {UnitConstants.SETTLE_DELAY * 1000:.0f} ms"
            )
    return UnitConstants.SETTLE_DELAY


# =============================================================================
# BASIS STATES
# =============================================================================

class BasisState:
    """Definite states a Unit can be created in, as (a, b) kets."""

    ZERO = 0
    ONE = 1
    MINUS_ONE = -1

    KETS = {
        ZERO: (1.0, 0.0),
        ONE: (0.0, 1.0),
        MINUS_ONE: (0.0, -1.0),
    }

    @classmethod
    def ket(cls, state: int) -> tuple:
        if state not in cls.KETS:
            raise ValueError(
                f"Invalid initial state {state}: must be one of {sorted(cls.KETS)}"
            )
        return cls.KETS[state]


# =============================================================================
# OPCODES
# =============================================================================

class OpCode(Enum):
    """
    VQ-ISA OpCodes.

    Gates (subject to the transition rule):
        ESP: Equal superposition (Hadamard)
        PXG: Pauli X (bit flip)
        PZG: Pauli Z (phase flip on the |1> component)
        JTS: 0.5 <-> 0.75/0.25 composite gate
        TSC: 0.75/0.25 <-> 0/1 composite gate
        CNOT: Controlled NOT

    Register operations:
        SHIFT, ENTANGLE, DISENTANGLE, ACTIVATE, MEASURE, BARRIER
    """
    ESP = auto()
    PXG = auto()
    PZG = auto()
    JTS = auto()
    TSC = auto()
    CNOT = auto()

    SHIFT = auto()
    ENTANGLE = auto()
    DISENTANGLE = auto()
    ACTIVATE = auto()
    MEASURE = auto()
    BARRIER = auto()


GATES = frozenset({
    OpCode.ESP, OpCode.PXG, OpCode.PZG,
    OpCode.JTS, OpCode.TSC, OpCode.CNOT,
})

SINGLE_UNIT_GATES = frozenset({
    OpCode.ESP, OpCode.PXG, OpCode.PZG, OpCode.JTS, OpCode.TSC,
})


# =============================================================================
# INSTRUCTION CLASS
# =============================================================================

@dataclass
class Instruction:
    """
    A single VQ-ISA instruction with operands.

    Attributes:
        opcode: The operation to perform
        target: Register address the operation acts on
        operands: Additional operands (control for CNOT, shift for SHIFT,
                  source and orientation for ENTANGLE)
        metadata: Debugging info ("line" is set by the assembler)
    """
    opcode: OpCode
    target: int = -1
    operands: List[Any] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [self.opcode.name]
        if self.opcode == OpCode.CNOT:
            parts += [str(self.operands[0]), str(self.target)]
        elif self.opcode == OpCode.ENTANGLE:
            parts += [str(self.target), str(self.operands[0]),
                      "SAME" if self.operands[1] else "OPPOSITE"]
        elif self.target >= 0:
            parts.append(str(self.target))
            parts += [str(o) for o in self.operands]
        return " ".join(parts)

    @classmethod
    def gate(cls, opcode: OpCode, target: int) -> "Instruction":
        """Create a single-unit gate instruction."""
        if opcode not in SINGLE_UNIT_GATES:
            raise ValueError(f"{opcode.name} is not a single-unit gate")
        return cls(opcode, target)

    @classmethod
    def cnot(cls, control: int, target: int) -> "Instruction":
        """Create CNOT instruction."""
        return cls(OpCode.CNOT, target, [control])

    @classmethod
    def shift(cls, target: int, value: int) -> "Instruction":
        """Create SHIFT instruction (phase += 1/2^value of a turn)."""
        if value < 0:
            raise ValueError(f"SHIFT value must be >= 0, got {value}")
        return cls(OpCode.SHIFT, target, [value])

    @classmethod
    def entangle(cls, target: int, source: int, same: bool = True) -> "Instruction":
        """Create ENTANGLE instruction (target follows source)."""
        return cls(OpCode.ENTANGLE, target, [source, same])

    @classmethod
    def disentangle(cls, target: int) -> "Instruction":
        return cls(OpCode.DISENTANGLE, target)

    @classmethod
    def activate(cls, target: int) -> "Instruction":
        return cls(OpCode.ACTIVATE, target)

    @classmethod
    def measure(cls, target: int) -> "Instruction":
        """Create MEASURE instruction."""
        return cls(OpCode.MEASURE, target)

    @classmethod
    def barrier(cls) -> "Instruction":
        return cls(OpCode.BARRIER)


# =============================================================================
# STATE FORMATTING
# =============================================================================

def format_ket(probability_of_zero: float, sign_a: int, sign_b: int) -> str:
    """
    Render a unit state in ket notation using squared magnitudes.

    Examples:
        (1, 0), (0, -1), (0.75, -0.25), (-0.5, 0.5)
    """
    if probability_of_zero == 0:
        return "(0, -1)" if sign_b < 0 else "(0, 1)"
    if probability_of_zero == 1:
        return "(-1, 0)" if sign_a < 0 else "(1, 0)"
    a = f"-{probability_of_zero}" if sign_a < 0 else f"{probability_of_zero}"
    b = f"-{1 - probability_of_zero}" if sign_b < 0 else f"{1 - probability_of_zero}"
    return f"({a}, {b})"
