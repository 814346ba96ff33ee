"""
Sequencer - Instruction Program Runner
======================================

Queues VQ-ISA instructions and executes them against a Register.

The sequencer enforces:
    1. Addresses inside the register
    2. No CNOT or ENTANGLE of a unit with itself
    3. Rejected gates are recorded, not fatal
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .isa import OpCode, Instruction, SINGLE_UNIT_GATES
from .register import Register


# =============================================================================
# EXCEPTIONS
# =============================================================================

class SequenceError(Exception):
    """Raised when an instruction program is malformed."""
    pass


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class SequenceResult:
    """
    Outcome of running a program.

    Attributes:
        outcomes: Measured bits per address, in measurement order
        rejected: Indices of instructions whose gate was refused
    """
    outcomes: Dict[int, List[int]] = field(default_factory=dict)
    rejected: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

    def last(self, address: int) -> Optional[int]:
        """Most recent outcome for an address."""
        bits = self.outcomes.get(address)
        return bits[-1] if bits else None


# =============================================================================
# SEQUENCER
# =============================================================================

class Sequencer:
    """
    Builder and runner for VQ-ISA programs.

    Example:
        >>> seq = Sequencer()
        >>> seq.esp(0).entangle(1, 0, same=False).measure(0).measure(1)
        Sequencer([ESP, ENTANGLE, MEASURE, MEASURE])
        >>> result = seq.run(create_register(2, settle=0))
        >>> result.last(0) != result.last(1)
        True
    """

    def __init__(self, instructions: Optional[List[Instruction]] = None):
        self.operations: List[Instruction] = list(instructions or [])
        self._validated_for: Optional[int] = None

    def _queue(self, instr: Instruction) -> "Sequencer":
        self.operations.append(instr)
        self._validated_for = None
        return self

    def esp(self, address: int) -> "Sequencer":
        return self._queue(Instruction.gate(OpCode.ESP, address))

    def pxg(self, address: int) -> "Sequencer":
        return self._queue(Instruction.gate(OpCode.PXG, address))

    def pzg(self, address: int) -> "Sequencer":
        return self._queue(Instruction.gate(OpCode.PZG, address))

    def jts(self, address: int) -> "Sequencer":
        return self._queue(Instruction.gate(OpCode.JTS, address))

    def tsc(self, address: int) -> "Sequencer":
        return self._queue(Instruction.gate(OpCode.TSC, address))

    def cnot(self, control: int, target: int) -> "Sequencer":
        return self._queue(Instruction.cnot(control, target))

    def shift(self, address: int, value: int) -> "Sequencer":
        return self._queue(Instruction.shift(address, value))

    def entangle(self, address: int, source: int, same: bool = True) -> "Sequencer":
        return self._queue(Instruction.entangle(address, source, same))

    def disentangle(self, address: int) -> "Sequencer":
        return self._queue(Instruction.disentangle(address))

    def activate(self, address: int) -> "Sequencer":
        return self._queue(Instruction.activate(address))

    def measure(self, address: int) -> "Sequencer":
        return self._queue(Instruction.measure(address))

    def barrier(self) -> "Sequencer":
        """Insert a barrier (no-op marker)."""
        return self._queue(Instruction.barrier())

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self, size: int) -> bool:
        """
        Validate the program against a register size.

        Returns:
            True if valid

        Raises:
            SequenceError listing every problem
        """
        errors = []

        def check(i: int, address: int) -> None:
            if not 0 <= address < size:
                errors.append(f"Op[{i}]: address {address} out of range [0, {size})")

        for i, op in enumerate(self.operations):
            if op.opcode == OpCode.BARRIER:
                continue
            check(i, op.target)
            if op.opcode in (OpCode.CNOT, OpCode.ENTANGLE):
                other = op.operands[0]
                check(i, other)
                if other == op.target:
                    errors.append(f"Op[{i}]: {op.opcode.name} links unit {other} to itself")
            elif op.opcode == OpCode.SHIFT and op.operands[0] > size:
                errors.append(
                    f"Op[{i}]: SHIFT {op.operands[0]} exceeds register size {size}"
                )

        if errors:
            raise SequenceError("\n".join(errors))

        self._validated_for = size
        return True

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def run(self, register: Register) -> SequenceResult:
        """
        Execute the program on a register.

        Args:
            register: Target register (mutated in place)
        """
        if self._validated_for != register.size:
            self.validate(register.size)

        result = SequenceResult()
        for i, op in enumerate(self.operations):
            ok = True
            if op.opcode in SINGLE_UNIT_GATES:
                ok = register.apply(op.opcode, op.target)
            elif op.opcode == OpCode.CNOT:
                ok = register.cnot(op.operands[0], op.target)
            elif op.opcode == OpCode.SHIFT:
                ok = register.shift_phase(op.target, op.operands[0])
            elif op.opcode == OpCode.ENTANGLE:
                ok = register.entangle(op.target, op.operands[0], op.operands[1])
            elif op.opcode == OpCode.DISENTANGLE:
                register.disentangle(op.target)
            elif op.opcode == OpCode.ACTIVATE:
                register.activate(op.target)
            elif op.opcode == OpCode.MEASURE:
                bit = register.measure(op.target)
                result.outcomes.setdefault(op.target, []).append(bit)

            if not ok:
                result.rejected.append(i)
        return result

    # =========================================================================
    # UTILITY
    # =========================================================================

    def dump(self) -> List[Dict[str, Any]]:
        """Dump the program for debugging."""
        return [
            {
                "idx": i,
                "op": op.opcode.name,
                "target": op.target,
                "operands": list(op.operands),
            }
            for i, op in enumerate(self.operations)
        ]

    def __repr__(self) -> str:
        ops = [op.opcode.name for op in self.operations]
        return f"Sequencer([{', '.join(ops)}])"

    def __len__(self) -> int:
        return len(self.operations)

    def clear(self) -> None:
        """Clear all queued instructions."""
        self.operations = []
        self._validated_for = None


# =============================================================================
# CONVENIENCE
# =============================================================================

def quick_sequence(superpose: List[int],
                   links: Optional[List[tuple]] = None,
                   measure: Optional[List[int]] = None) -> Sequencer:
    """
    Quickly build a program: ESP some units, CNOT pairs, measure.

    Args:
        superpose: Addresses to put in equal superposition
        links: List of (control, target) tuples
        measure: Addresses to measure (default: every address mentioned)
    """
    seq = Sequencer()

    for addr in superpose:
        seq.esp(addr)

    seq.barrier()

    for ctrl, tgt in (links or []):
        seq.cnot(ctrl, tgt)

    seq.barrier()

    if measure is None:
        mentioned = set(superpose)
        for ctrl, tgt in (links or []):
            mentioned.update((ctrl, tgt))
        measure = sorted(mentioned)
    for addr in measure:
        seq.measure(addr)

    return seq
