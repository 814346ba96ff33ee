"""
Unit Tests for the VQBit Compiler Stack
=======================================

Tests the VQ-ISA, the text assembler and the qiskit circuit export.
Circuits are checked with qiskit's Statevector; no backend is needed.
"""

import sys
import os
import tempfile
import unittest

import numpy as np
from qiskit.quantum_info import Statevector

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vqbit.isa import OpCode, Instruction, format_ket
from vqbit.compiler import (
    GateAssembler,
    CircuitCompiler,
    assemble,
    compile_program,
    load_program,
    expected_zero_probabilities,
)


class TestOpCodes(unittest.TestCase):
    """Test VQ-ISA OpCode enum."""

    def test_all_opcodes_defined(self):
        required = ['ESP', 'PXG', 'PZG', 'JTS', 'TSC', 'CNOT', 'SHIFT', 'MEASURE']
        for op in required:
            self.assertTrue(hasattr(OpCode, op), f"Missing OpCode: {op}")

    def test_opcode_values_unique(self):
        values = [op.value for op in OpCode]
        self.assertEqual(len(values), len(set(values)))


class TestInstruction(unittest.TestCase):

    def test_gate_instruction(self):
        instr = Instruction.gate(OpCode.JTS, 2)
        self.assertEqual(instr.opcode, OpCode.JTS)
        self.assertEqual(instr.target, 2)

    def test_gate_rejects_register_ops(self):
        with self.assertRaises(ValueError):
            Instruction.gate(OpCode.MEASURE, 0)

    def test_cnot_instruction(self):
        instr = Instruction.cnot(0, 1)
        self.assertEqual(instr.target, 1)
        self.assertEqual(instr.operands, [0])
        self.assertEqual(str(instr), "CNOT 0 1")

    def test_shift_negative(self):
        with self.assertRaises(ValueError):
            Instruction.shift(0, -1)

    def test_entangle_str(self):
        self.assertEqual(str(Instruction.entangle(1, 0, False)), "ENTANGLE 1 0 OPPOSITE")

    def test_format_ket(self):
        self.assertEqual(format_ket(0.75, 1, -1), "(0.75, -0.25)")
        self.assertEqual(format_ket(0.0, 1, -1), "(0, -1)")
        self.assertEqual(format_ket(0.5, -1, 1), "(-0.5, 0.5)")


class TestAssembler(unittest.TestCase):

    def test_basic_program(self):
        source = """
        # Opposite pair
        ESP 0
        entangle 1 0 opposite
        SHIFT 0 3   # eighth turn
        CNOT 0 2
        BARRIER
        MEASURE 0
        """
        instrs = GateAssembler().assemble(source)
        self.assertEqual(
            [i.opcode for i in instrs],
            [OpCode.ESP, OpCode.ENTANGLE, OpCode.SHIFT, OpCode.CNOT,
             OpCode.BARRIER, OpCode.MEASURE],
        )
        self.assertEqual(instrs[1].operands, [0, False])
        self.assertEqual(instrs[2].operands, [3])
        self.assertEqual(instrs[3].target, 2)

    def test_entangle_defaults_to_same(self):
        instr = assemble("ENTANGLE 1 0")[0]
        self.assertEqual(instr.operands, [0, True])

    def test_syntax_errors(self):
        bad = [
            "FOO 0",
            "ESP",
            "ESP x",
            "CNOT 0",
            "SHIFT 0 -1",
            "ENTANGLE 1",
            "ENTANGLE 1 0 SIDEWAYS",
        ]
        for source in bad:
            with self.assertRaises(SyntaxError, msg=source):
                assemble(source)

    def test_error_reports_line(self):
        with self.assertRaises(SyntaxError) as ctx:
            assemble("ESP 0\nBOGUS 1")
        self.assertIn("Line 2", str(ctx.exception))

    def test_source_lines_recorded(self):
        """Each instruction remembers the line it was assembled from."""
        instrs = assemble("\n# pair\nESP 0\n\nMEASURE 0  # read\n")
        self.assertEqual([i.metadata["line"] for i in instrs], [3, 5])

    def test_error_line_counts_leading_blanks(self):
        with self.assertRaises(SyntaxError) as ctx:
            assemble("\n\nBOGUS 1")
        self.assertIn("Line 3", str(ctx.exception))

    def test_load_program(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pair.vq")
            with open(path, "w") as f:
                f.write("ESP 0\nMEASURE 0\n")
            self.assertEqual(len(load_program(path)), 2)


class TestCircuitCompiler(unittest.TestCase):

    def test_simple_circuit(self):
        qc = compile_program("ESP 0\nMEASURE 0", size=1)
        self.assertEqual(qc.num_qubits, 1)
        self.assertEqual(qc.num_clbits, 1)
        ops = qc.count_ops()
        self.assertEqual(ops["h"], 1)
        self.assertEqual(ops["measure"], 1)

    def test_no_measure(self):
        qc = compile_program("ESP 0\nMEASURE 0", size=1, measure=False)
        self.assertEqual(qc.num_clbits, 0)
        self.assertNotIn("measure", qc.count_ops())

    def test_basis_preparation(self):
        qc = compile_program("PXG 0", size=2, initial=[1, -1], measure=False)
        ops = qc.count_ops()
        self.assertEqual(ops["x"], 3)
        self.assertEqual(ops["z"], 1)

    def test_composite_gates_become_unitaries(self):
        qc = compile_program("ESP 0\nJTS 0\nTSC 0", size=1, measure=False)
        self.assertEqual(qc.count_ops()["unitary"], 2)

    def test_rejected_gates_are_skipped(self):
        compiler = CircuitCompiler(1)
        qc = compiler.compile(assemble("JTS 0\nESP 0\nTSC 0"), measure=False)
        self.assertEqual(compiler.rejected, [0, 2])
        self.assertNotIn("unitary", qc.count_ops())

    def test_rejection_warning_names_source_line(self):
        compiler = CircuitCompiler(1)
        with self.assertLogs("vqbit.compiler", level="WARNING") as logs:
            compiler.compile(assemble("ESP 0\n\nTSC 0"), measure=False)
        self.assertTrue(any("(line 3)" in msg for msg in logs.output))

    def test_shift_and_entangle(self):
        qc = compile_program("ESP 0\nSHIFT 0 2\nENTANGLE 1 0 OPPOSITE", size=2)
        ops = qc.count_ops()
        self.assertEqual(ops["p"], 1)
        self.assertEqual(ops["cx"], 1)
        self.assertEqual(ops["x"], 1)

    def test_statevector_matches_units(self):
        """qiskit's probabilities agree with the unit simulation."""
        source = "ESP 0\nJTS 0\nPXG 1\nTSC 1\nESP 2\nPZG 2\nJTS 2"
        expected = expected_zero_probabilities(source, size=3)
        np.testing.assert_allclose(expected, [0.75, 0.25, 0.25])

        qc = compile_program(source, size=3, measure=False)
        state = Statevector.from_instruction(qc)
        for q in range(3):
            p0 = state.probabilities([q])[0]
            self.assertAlmostEqual(p0, expected[q], places=6)

    def test_expected_probabilities_none_on_rejection(self):
        self.assertIsNone(expected_zero_probabilities("TSC 0\nESP 0\nTSC 0", size=1))


if __name__ == "__main__":
    unittest.main(verbosity=2)
