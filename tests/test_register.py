"""
Register Test Cartridge
=======================

Test suite for the Register and the Sequencer.

Tests:
    1. Allocation and addressing
    2. Gates, CNOT and entanglement through addresses
    3. Phase shifts and the Quantum Fourier Transform
    4. Sequencer validation and execution
"""

import sys
import os
import unittest

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vqbit.isa import OpCode, Instruction
from vqbit.measurer import UniformMeasurer
from vqbit.register import Register, AddressError, create_register, fourier_transform
from vqbit.sequencer import Sequencer, SequenceError, quick_sequence


def make(size, initial=0, seed=0):
    return create_register(size, initial, measurer=UniformMeasurer(seed=seed), settle=0)


class TestRegister(unittest.TestCase):

    def test_create_register(self):
        reg = make(4)
        self.assertEqual(len(reg), 4)
        self.assertEqual(reg.describe(), ["(1, 0)"] * 4)
        self.assertEqual([u.index for u in reg], [0, 1, 2, 3])

    def test_units_share_measurer(self):
        reg = make(3)
        self.assertTrue(all(u.measurer is reg.measurer for u in reg))

    def test_per_unit_initial_values(self):
        reg = make(3, [0, 1, -1])
        self.assertEqual(reg.describe(), ["(1, 0)", "(0, 1)", "(0, -1)"])

    def test_size_bounds(self):
        """Sizes outside 1..100 raise."""
        for size in (0, 101):
            with self.assertRaises(ValueError):
                Register(size, settle=0)

    def test_initial_length_mismatch(self):
        with self.assertRaises(ValueError):
            Register(3, [0, 1], settle=0)

    def test_address_bounds(self):
        reg = make(2)
        with self.assertRaises(AddressError):
            reg.apply(OpCode.ESP, 2)
        with self.assertRaises(AddressError):
            reg[-1]

    def test_apply(self):
        reg = make(2)
        self.assertTrue(reg.apply(OpCode.ESP, 0))
        self.assertFalse(reg.apply(OpCode.JTS, 1))
        np.testing.assert_allclose(reg.probabilities(), [0.5, 1.0])
        ops = [op for op in reg._op_log if op["op"] == "JTS"]
        self.assertEqual(ops, [{"op": "JTS", "addr": 1, "ok": False}])

    def test_apply_rejects_non_gate(self):
        reg = make(2)
        with self.assertRaises(ValueError):
            reg.apply(OpCode.MEASURE, 0)

    def test_cnot(self):
        reg = make(2, [1, 0])
        self.assertTrue(reg.cnot(0, 1))
        self.assertEqual(reg.measure_all(), [1, 1])

    def test_cnot_self_raises(self):
        reg = make(2)
        with self.assertRaises(ValueError):
            reg.cnot(1, 1)

    def test_entangled_pair(self):
        """Opposite follower always disagrees with its source."""
        for seed in range(10):
            reg = make(2, seed=seed)
            reg.apply(OpCode.ESP, 0)
            self.assertTrue(reg.entangle(1, 0, same=False))
            a, b = reg.measure_all()
            self.assertNotEqual(a, b)

    def test_disentangle(self):
        reg = make(2)
        reg.entangle(1, 0)
        reg.disentangle(1)
        self.assertTrue(reg[1].valid)

    def test_dump(self):
        reg = make(2)
        reg.apply(OpCode.ESP, 0)
        dump = reg.dump()
        self.assertEqual(dump["size"], 2)
        self.assertEqual(dump["units"][0]["ket"], "(0.5, 0.5)")
        self.assertTrue(dump["units"][0]["active"])
        self.assertEqual(len(dump["op_log"]), 1)


class TestPhase(unittest.TestCase):

    def test_shift_phase(self):
        reg = make(4)
        self.assertTrue(reg.shift_phase(0, 3))
        self.assertFalse(reg.shift_phase(0, 5))
        self.assertEqual(reg[0].describe_phase(), (3, [0]))

    def test_fourier_transform(self):
        """Values 1,0,0,1: unit i picks up 1/2^(3-i+1) from the last unit."""
        reg = fourier_transform([1, 0, 0, 1], measurer=UniformMeasurer(), settle=0)
        self.assertIsNotNone(reg)
        self.assertEqual(
            [u.describe_phase() for u in reg],
            [(4, [0]), (3, [0]), (2, [0]), (0, [])],
        )
        np.testing.assert_allclose(reg.probabilities(), [0.5, 0.5, 0.5, 0.0])
        self.assertEqual(reg[0].ket(), "(0.5, -0.5)")

    def test_fourier_transform_bounds(self):
        self.assertIsNone(fourier_transform([1], settle=0))
        self.assertIsNone(fourier_transform([0] * 101, settle=0))

    def test_shift_all(self):
        reg = fourier_transform([1, 0, 0, 1], measurer=UniformMeasurer(), settle=0)
        self.assertTrue(reg.shift_all(4))
        self.assertEqual(
            [u.describe_phase() for u in reg],
            [(3, [0]), (4, [0, 1]), (4, [0, 2]), (4, [0])],
        )
        self.assertEqual(len(reg.phases()), 4)


class TestSequencer(unittest.TestCase):

    def test_basic_sequence(self):
        seq = Sequencer()
        seq.esp(0).barrier().cnot(0, 1).measure(0)
        self.assertEqual(len(seq), 4)
        self.assertEqual(repr(seq), "Sequencer([ESP, BARRIER, CNOT, MEASURE])")

    def test_validation_passes(self):
        seq = Sequencer().esp(0).shift(1, 2).entangle(1, 0)
        self.assertTrue(seq.validate(2))

    def test_validation_errors(self):
        for seq in (Sequencer().esp(4),
                    Sequencer().cnot(1, 1),
                    Sequencer().entangle(0, 0),
                    Sequencer().shift(0, 5)):
            with self.assertRaises(SequenceError):
                seq.validate(4)

    def test_run(self):
        seq = Sequencer().esp(0).entangle(1, 0, same=False).measure(0).measure(1)
        result = seq.run(make(2, seed=3))
        self.assertTrue(result.ok)
        self.assertEqual(result.last(1), 1 - result.last(0))
        self.assertIsNone(result.last(5))

    def test_rejected_gates_recorded(self):
        seq = Sequencer().jts(0).esp(0).tsc(0)
        result = seq.run(make(1))
        self.assertEqual(result.rejected, [0, 2])
        self.assertFalse(result.ok)

    def test_run_validates_against_register(self):
        seq = Sequencer().esp(3)
        with self.assertRaises(SequenceError):
            seq.run(make(2))

    def test_from_instructions(self):
        seq = Sequencer([Instruction.gate(OpCode.PXG, 0), Instruction.measure(0)])
        result = seq.run(make(1))
        self.assertEqual(result.outcomes, {0: [1]})

    def test_quick_sequence(self):
        seq = quick_sequence([0], links=[(0, 1)])
        op_types = [op["op"] for op in seq.dump()]
        self.assertEqual(op_types.count("ESP"), 1)
        self.assertIn("CNOT", op_types)
        self.assertEqual(op_types.count("MEASURE"), 2)

    def test_clear(self):
        seq = Sequencer().esp(0)
        seq.clear()
        self.assertEqual(len(seq), 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
