"""
Gate Tables
===========

Fixed 2x2 matrices for the VQBit gate set.

The composite gates JTS and TSC are not single matrices. Each one picks one
of three closed-form matrices from the unit's discriminant:

    (magnitude, sign_a == sign_b, phase.sign())

The tables below map every reachable discriminant to its matrix, so the
selection can be checked without building a Unit.

JTS (equal superposition <-> 0.75/0.25):
    WIDE   = [[(2+r3)/(r6+r2),  1/(r6+r2)],
              [1/(r6+r2),     -(2+r3)/(r6+r2)]]
    NARROW = [[(2-r3)/(r6-r2),  1/(r6-r2)],
              [1/(r6-r2),     -(2-r3)/(r6-r2)]]
    -NARROW

TSC (0.75/0.25 <-> definite 0/1), h = sqrt(3)/2:
    LIFT  = [[ h,  1/2], [ 1/2, -h]]
    RAISE = [[-h,  1/2], [ 1/2,  h]]
    LOWER = [[ h, -1/2], [-1/2, -h]]
"""

from typing import Dict, Optional, Tuple

import numpy as np


Discriminant = Tuple[float, bool, int]


# =============================================================================
# FIXED GATES
# =============================================================================

ESP_MATRIX = np.array([[1.0, 1.0], [1.0, -1.0]]) / np.sqrt(2)
PXG_MATRIX = np.array([[0.0, 1.0], [1.0, 0.0]])
PZG_MATRIX = np.array([[1.0, 0.0], [0.0, -1.0]])


# =============================================================================
# JTS: 0.5 <-> 0.75 / 0.25
# =============================================================================

_R2, _R3, _R6 = np.sqrt(2), np.sqrt(3), np.sqrt(6)

JTS_WIDE = np.array([
    [(2 + _R3) / (_R6 + _R2), 1 / (_R6 + _R2)],
    [1 / (_R6 + _R2), -(2 + _R3) / (_R6 + _R2)],
])
JTS_NARROW = np.array([
    [(2 - _R3) / (_R6 - _R2), 1 / (_R6 - _R2)],
    [1 / (_R6 - _R2), -(2 - _R3) / (_R6 - _R2)],
])
JTS_NARROW_NEG = -JTS_NARROW

JTS_TABLE: Dict[Discriminant, np.ndarray] = {}
for _phase in (1, -1):
    JTS_TABLE[(0.25, True, _phase)] = JTS_WIDE
    JTS_TABLE[(0.75, False, _phase)] = JTS_WIDE
    JTS_TABLE[(0.75, True, _phase)] = JTS_NARROW
    JTS_TABLE[(0.25, False, _phase)] = JTS_NARROW_NEG
# Equal superposition: the phase parity picks which 0.75/0.25 pair to enter
JTS_TABLE[(0.5, True, 1)] = JTS_WIDE
JTS_TABLE[(0.5, False, 1)] = JTS_WIDE
JTS_TABLE[(0.5, True, -1)] = JTS_NARROW
JTS_TABLE[(0.5, False, -1)] = JTS_NARROW_NEG


# =============================================================================
# TSC: 0.75 / 0.25 <-> 0 / 1
# =============================================================================

_H = np.sqrt(3) / 2

TSC_LIFT = np.array([[_H, 0.5], [0.5, -_H]])
TSC_RAISE = np.array([[-_H, 0.5], [0.5, _H]])
TSC_LOWER = np.array([[_H, -0.5], [-0.5, -_H]])

TSC_TABLE: Dict[Discriminant, np.ndarray] = {}
for _phase in (1, -1):
    TSC_TABLE[(0.75, True, _phase)] = TSC_LIFT
    TSC_TABLE[(0.25, False, _phase)] = TSC_LIFT
    TSC_TABLE[(0.25, True, _phase)] = TSC_RAISE
    TSC_TABLE[(0.75, False, _phase)] = TSC_LOWER
for _agree in (True, False):
    TSC_TABLE[(0.0, _agree, -1)] = TSC_LIFT
    TSC_TABLE[(1.0, _agree, -1)] = TSC_LIFT
    TSC_TABLE[(0.0, _agree, 1)] = TSC_RAISE
    TSC_TABLE[(1.0, _agree, 1)] = TSC_LOWER

del _phase, _agree


def select(table: Dict[Discriminant, np.ndarray],
           discriminant: Discriminant) -> Optional[np.ndarray]:
    """Matrix for a discriminant, or None when the table has no entry."""
    return table.get(discriminant)


def is_involution(matrix: np.ndarray) -> bool:
    """True if applying the matrix twice is the identity."""
    return bool(np.allclose(matrix @ matrix, np.eye(2)))
