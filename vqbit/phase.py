"""
Phase Accumulator
=================

Tracks the composite relative phase of a Unit as an exact dyadic fraction
of a full turn.

Successive shifts e^(2*pi*i/2^m1) * e^(2*pi*i/2^m2) * ... are kept as

    e^(2*pi*i * (2^(base-m1) + 2^(base-m2) + ...) / 2^base)

so a Quantum Fourier Transform style cascade of shifts never accumulates
floating point error.

Representation:
    - base: exponent of the common denominator (0 means phase == 1)
    - slots: one counter per index k (term 2^k / 2^base)
        -1  -> absent
        c>=0 -> present, holding c+1 unit fractions (c >= 1 must carry)
    - one guard slot past the register size catches the full-turn carry
"""

import logging
from fractions import Fraction
from typing import List, Tuple

from .isa import UnitConstants


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


ABSENT = -1


class PhaseAccumulator:
    """
    Exact relative phase with carry reduction.

    Canonical form (holds after every shift):
        - no slot holds a carryable count
        - the slot at index `base` is never present (a full turn == 1)
        - slot 0 is present whenever base > 0, and base == 0 when no slot is

    Example:
        >>> ph = PhaseAccumulator(4)
        >>> ph.shift_phase(3)     # 1/8
        True
        >>> ph.shift_phase(3)     # 2/8 -> 1/4
        True
        >>> ph.describe()
        (2, (0, -1, -1, -1))
    """

    def __init__(self, size: int):
        self.valid = (
            UnitConstants.MIN_REGISTER_SIZE <= size <= UnitConstants.MAX_REGISTER_SIZE
        )
        self.size = size if self.valid else 0
        self.base = 0
        self._slots: List[int] = [ABSENT] * (self.size + 1)

        if not self.valid:
            logger.error(f"PhaseAccumulator: invalid register size {size}")

    # =========================================================================
    # SHIFT
    # =========================================================================

    def shift_phase(self, val: int) -> bool:
        """
        Add 1/2^val of a turn to the phase.

        Args:
            val: Exponent of the unit fraction (0 is a full turn, a no-op)

        Returns:
            False when the accumulator is invalid or val is out of range
        """
        if not self.valid:
            logger.warning("shift_phase: accumulator has no valid register size")
            return False
        if not 0 <= val <= self.size:
            logger.warning(f"shift_phase: invalid input {val} (register size {self.size})")
            return False
        if val == 0:
            return True

        if self.base == 0:
            self.base = val
            self._slots[0] = 0
            return True

        if val > self.base:
            # Finer denominator: move every term up, new fraction lands at 0
            offset = val - self.base
            for i in range(self.base - 1, -1, -1):
                self._slots[i + offset] = self._slots[i]
                self._slots[i] = ABSENT
            self.base = val
            self._slots[0] = 0
        else:
            self._slots[self.base - val] += 1
            self._reduce()
        return True

    def _reduce(self) -> None:
        """Binary carry, drop full turns, normalise the lowest term to 0."""
        for i in range(self.base):
            fractions = self._slots[i] + 1
            if fractions > 1:
                self._slots[i] = fractions % 2 - 1
                self._slots[i + 1] += fractions // 2

        # e^(2*pi*i) == 1
        self._slots[self.base] = ABSENT

        low = next((i for i in range(self.base) if self._slots[i] != ABSENT), None)
        if low is None:
            self.base = 0
            return
        if low > 0:
            for i in range(low, self.base):
                self._slots[i - low] = self._slots[i]
                self._slots[i] = ABSENT
            self.base -= low

    # =========================================================================
    # QUERIES
    # =========================================================================

    def sign(self) -> int:
        """-1 when base is odd, +1 when even."""
        return -1 if self.base % 2 else 1

    @property
    def slots(self) -> Tuple[int, ...]:
        """Slot counters, one per register index."""
        return tuple(self._slots[:self.size])

    def present_indices(self) -> List[int]:
        return [i for i in range(self.base) if self._slots[i] != ABSENT]

    def describe(self) -> Tuple[int, Tuple[int, ...]]:
        """(base, slots) snapshot for display."""
        return self.base, self.slots

    def as_fraction(self) -> Fraction:
        """Phase as an exact fraction of a full turn, in [0, 1)."""
        if self.base == 0:
            return Fraction(0)
        return Fraction(sum(2 ** i for i in self.present_indices()), 2 ** self.base)

    def is_trivial(self) -> bool:
        return self.base == 0

    def __str__(self) -> str:
        terms = " + ".join(f"2^{i}" for i in self.present_indices())
        return f"exp(2*pi*i*({terms or '0'})/2^{self.base})"

    def __repr__(self) -> str:
        return f"PhaseAccumulator(base={self.base}, present={self.present_indices()})"
