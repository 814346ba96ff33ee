"""
Gate Table Tests
================

Checks the fixed matrices and the JTS/TSC selection tables directly,
without building a Unit.
"""

import sys
import os
import unittest

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vqbit import gates
from vqbit.amplitude import AmplitudePair


class TestFixedGates(unittest.TestCase):

    def test_all_matrices_are_involutions(self):
        """Every gate matrix undoes itself."""
        for name in ("ESP_MATRIX", "PXG_MATRIX", "PZG_MATRIX",
                     "JTS_WIDE", "JTS_NARROW", "JTS_NARROW_NEG",
                     "TSC_LIFT", "TSC_RAISE", "TSC_LOWER"):
            self.assertTrue(gates.is_involution(getattr(gates, name)), name)

    def test_narrow_entries(self):
        """NARROW is the cos/sin(15 deg) reflection."""
        c, s = np.cos(np.pi / 12), np.sin(np.pi / 12)
        np.testing.assert_allclose(gates.JTS_NARROW, [[s, c], [c, -s]])
        np.testing.assert_allclose(gates.JTS_WIDE, [[c, s], [s, -c]])


class TestSelectionTables(unittest.TestCase):

    def test_jts_covers_every_non_definite_state(self):
        for magnitude in (0.25, 0.5, 0.75):
            for agree in (True, False):
                for phase in (1, -1):
                    self.assertIsNotNone(
                        gates.select(gates.JTS_TABLE, (magnitude, agree, phase))
                    )

    def test_jts_has_no_definite_entries(self):
        self.assertIsNone(gates.select(gates.JTS_TABLE, (0.0, True, 1)))
        self.assertIsNone(gates.select(gates.JTS_TABLE, (1.0, True, 1)))

    def test_tsc_has_no_equal_superposition_entry(self):
        self.assertIsNone(gates.select(gates.TSC_TABLE, (0.5, True, 1)))

    def test_jts_results_stay_on_magnitude_set(self):
        """Applying the selected matrix to a matching ket keeps it valid."""
        r2, h = 1 / np.sqrt(2), np.sqrt(3) / 2
        kets = [(r2, r2), (r2, -r2), (h, 0.5), (h, -0.5), (0.5, h), (0.5, -h)]
        for a, b in kets:
            pair = AmplitudePair(a, b)
            for phase in (1, -1):
                disc = (pair.probability_of_zero, pair.sign_a == pair.sign_b, phase)
                matrix = gates.select(gates.JTS_TABLE, disc)
                out = AmplitudePair(*(matrix @ pair.as_vector()))
                self.assertTrue(out.valid, f"JTS {disc} on {(a, b)}")

    def test_tsc_results_stay_on_magnitude_set(self):
        h = np.sqrt(3) / 2
        kets = [(1, 0), (0, 1), (h, 0.5), (h, -0.5), (0.5, h), (0.5, -h)]
        for a, b in kets:
            pair = AmplitudePair(a, b)
            for phase in (1, -1):
                disc = (pair.probability_of_zero, pair.sign_a == pair.sign_b, phase)
                matrix = gates.select(gates.TSC_TABLE, disc)
                out = AmplitudePair(*(matrix @ pair.as_vector()))
                self.assertTrue(out.valid, f"TSC {disc} on {(a, b)}")


if __name__ == "__main__":
    unittest.main(verbosity=2)
