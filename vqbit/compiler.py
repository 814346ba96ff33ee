"""
VQBit Compiler: Assembly -> VQ-ISA -> Qiskit
============================================

Pipeline:
    1. ASSEMBLE: text program -> VQ-ISA Instructions
    2. COMPILE: Instructions -> Qiskit QuantumCircuit

The circuit is an export for cross-checking with qiskit tooling. JTS and
TSC have no fixed matrix, so the compiler replays the program on a shadow
Register and emits the matrix each composite gate would select at that
point. Measurements are emitted but never collapse the shadow.
"""

import logging
from typing import List, Optional, Sequence, Union

import numpy as np
from qiskit import QuantumCircuit, QuantumRegister, ClassicalRegister

from .isa import OpCode, Instruction, BasisState, SINGLE_UNIT_GATES
from .measurer import UniformMeasurer
from .register import Register
from .sequencer import Sequencer


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# =============================================================================
# ASSEMBLER (Text Assembly Format)
# =============================================================================

class GateAssembler:
    """
    Assembler for VQ-ISA text format.

    Example:
        # Opposite pair
        ESP 0
        ENTANGLE 1 0 OPPOSITE
        SHIFT 0 3
        CNOT 0 2
        MEASURE 0
        MEASURE 1
    """

    ORIENTATIONS = {"SAME": True, "OPPOSITE": False}

    def assemble(self, source: str) -> List[Instruction]:
        """Assemble VQ-ISA text to instructions."""
        instructions = []

        for line_num, line in enumerate(source.split('\n'), 1):
            line = line.split('#', 1)[0].strip()
            if not line:
                continue

            parts = line.split()
            opcode_str = parts[0].upper()

            try:
                opcode = OpCode[opcode_str]
            except KeyError:
                raise SyntaxError(f"Line {line_num}: Unknown opcode '{opcode_str}'")

            try:
                args = [int(p) for p in parts[1:]] if opcode != OpCode.ENTANGLE else None
            except ValueError:
                raise SyntaxError(f"Line {line_num}: {opcode.name} expects integer operands")

            if opcode == OpCode.BARRIER:
                instructions.append(Instruction.barrier())

            elif opcode in SINGLE_UNIT_GATES:
                self._arity(line_num, opcode, args, 1)
                instructions.append(Instruction.gate(opcode, args[0]))

            elif opcode == OpCode.CNOT:
                self._arity(line_num, opcode, args, 2)
                instructions.append(Instruction.cnot(args[0], args[1]))

            elif opcode == OpCode.SHIFT:
                self._arity(line_num, opcode, args, 2)
                if args[1] < 0:
                    raise SyntaxError(f"Line {line_num}: SHIFT value must be >= 0")
                instructions.append(Instruction.shift(args[0], args[1]))

            elif opcode == OpCode.ENTANGLE:
                instructions.append(self._entangle(line_num, parts[1:]))

            elif opcode == OpCode.DISENTANGLE:
                self._arity(line_num, opcode, args, 1)
                instructions.append(Instruction.disentangle(args[0]))

            elif opcode == OpCode.ACTIVATE:
                self._arity(line_num, opcode, args, 1)
                instructions.append(Instruction.activate(args[0]))

            elif opcode == OpCode.MEASURE:
                self._arity(line_num, opcode, args, 1)
                instructions.append(Instruction.measure(args[0]))

            instructions[-1].metadata["line"] = line_num

        return instructions

    @staticmethod
    def _arity(line_num: int, opcode: OpCode, args: List[int], n: int) -> None:
        if len(args) != n:
            raise SyntaxError(
                f"Line {line_num}: {opcode.name} requires {n} operand(s), got {len(args)}"
            )

    def _entangle(self, line_num: int, parts: List[str]) -> Instruction:
        if len(parts) not in (2, 3):
            raise SyntaxError(f"Line {line_num}: ENTANGLE requires target, source [SAME|OPPOSITE]")
        try:
            target, source = int(parts[0]), int(parts[1])
        except ValueError:
            raise SyntaxError(f"Line {line_num}: ENTANGLE expects integer addresses")
        same = True
        if len(parts) == 3:
            key = parts[2].upper()
            if key not in self.ORIENTATIONS:
                raise SyntaxError(f"Line {line_num}: Unknown orientation '{parts[2]}'")
            same = self.ORIENTATIONS[key]
        return Instruction.entangle(target, source, same)


def _source_line(instr: Instruction) -> str:
    line = instr.metadata.get("line")
    return f" (line {line})" if line is not None else ""


# =============================================================================
# CIRCUIT COMPILER
# =============================================================================

class CircuitCompiler:
    """
    Compiles VQ-ISA Instructions to a Qiskit QuantumCircuit.

    Mapping:
        ESP -> h, PXG -> x, PZG -> z
        JTS / TSC -> unitary (matrix chosen by the shadow register)
        SHIFT k -> p(2*pi / 2^k)
        CNOT -> cx
        ENTANGLE -> cx from source (+ x on target when opposite)
        MEASURE -> measure into the clbit of the same index
    """

    def __init__(self, size: int, initial: Union[int, Sequence[int]] = 0):
        self.size = size
        self.initial = [initial] * size if isinstance(initial, int) else list(initial)
        self.rejected: List[int] = []

    def compile(self, instructions: List[Instruction],
                measure: bool = True, name: str = "VQBit") -> QuantumCircuit:
        """
        Compile instructions to a quantum circuit.

        Args:
            instructions: VQ-ISA instructions
            measure: Emit MEASURE instructions (False gives a unitary circuit)
            name: Circuit name

        Returns:
            Compiled QuantumCircuit
        """
        shadow = Register(self.size, self.initial, measurer=UniformMeasurer(), settle=0)
        self.rejected = []

        qreg = QuantumRegister(self.size, 'q')
        if measure:
            creg = ClassicalRegister(self.size, 'meas')
            qc = QuantumCircuit(qreg, creg, name=name)
        else:
            qc = QuantumCircuit(qreg, name=name)

        # === LAYER 1: BASIS PREPARATION ===
        for i, value in enumerate(self.initial):
            if value != BasisState.ZERO:
                qc.x(qreg[i])
            if value == BasisState.MINUS_ONE:
                qc.z(qreg[i])

        # === LAYER 2: PROGRAM ===
        for i, instr in enumerate(instructions):
            op = instr.opcode
            if op in SINGLE_UNIT_GATES:
                unit = shadow[instr.target]
                matrix = unit.gate_matrix(op)
                if matrix is None:
                    logger.warning(
                        f"⚠️ Op[{i}]{_source_line(instr)}: {instr} "
                        f"rejected in state {unit.ket()}"
                    )
                    self.rejected.append(i)
                    continue
                self._emit_gate(qc, qreg[instr.target], op, matrix)
                shadow.apply(op, instr.target)

            elif op == OpCode.CNOT:
                control = instr.operands[0]
                if not shadow.cnot(control, instr.target):
                    self.rejected.append(i)
                    continue
                qc.cx(qreg[control], qreg[instr.target])

            elif op == OpCode.SHIFT:
                value = instr.operands[0]
                if not shadow.shift_phase(instr.target, value):
                    self.rejected.append(i)
                    continue
                if value > 0:
                    qc.p(2 * np.pi / 2 ** value, qreg[instr.target])

            elif op == OpCode.ENTANGLE:
                source, same = instr.operands
                if not shadow.entangle(instr.target, source, same):
                    self.rejected.append(i)
                    continue
                qc.cx(qreg[source], qreg[instr.target])
                if not same:
                    qc.x(qreg[instr.target])

            elif op == OpCode.DISENTANGLE:
                shadow.disentangle(instr.target)

            elif op == OpCode.ACTIVATE:
                shadow.activate(instr.target)

            elif op == OpCode.BARRIER:
                qc.barrier()

            elif op == OpCode.MEASURE and measure:
                qc.measure(qreg[instr.target], creg[instr.target])

        return qc

    @staticmethod
    def _emit_gate(qc: QuantumCircuit, qubit, op: OpCode, matrix: np.ndarray) -> None:
        if op == OpCode.ESP:
            qc.h(qubit)
        elif op == OpCode.PXG:
            qc.x(qubit)
        elif op == OpCode.PZG:
            qc.z(qubit)
        else:
            qc.unitary(matrix, [qubit], label=op.name)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def assemble(source: str) -> List[Instruction]:
    """Convenience function to assemble VQ-ISA text."""
    return GateAssembler().assemble(source)


def compile_program(source: str, size: int,
                    initial: Union[int, Sequence[int]] = 0,
                    measure: bool = True) -> QuantumCircuit:
    """
    Convenience function to compile VQ-ISA assembly.

    Args:
        source: VQ-ISA assembly source
        size: Register size
        initial: Basis state(s) of the register
        measure: Emit measurements

    Returns:
        Compiled QuantumCircuit
    """
    instructions = GateAssembler().assemble(source)
    return CircuitCompiler(size, initial).compile(instructions, measure=measure)


def load_program(filepath: str) -> List[Instruction]:
    """Assemble a VQ-ISA file."""
    with open(filepath, 'r') as f:
        return GateAssembler().assemble(f.read())


def expected_zero_probabilities(source: str, size: int,
                                initial: Union[int, Sequence[int]] = 0) -> Optional[np.ndarray]:
    """
    Simulate a program's gates on a fresh register without measuring.

    Returns:
        Probability of 0 per unit, or None if any gate was refused
    """
    reg = Register(size, initial, measurer=UniformMeasurer(), settle=0)
    instructions = [i for i in assemble(source) if i.opcode != OpCode.MEASURE]
    result = Sequencer(instructions).run(reg)
    if not result.ok:
        return None
    return reg.probabilities()
