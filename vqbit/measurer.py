"""
Measurers - Collapse Randomness
===============================

A Unit in superposition asks its Measurer for a small residue when it is
measured, then maps the residue to 0 or 1 according to its magnitude.

Measurers are swappable. The default TimingJitterMeasurer folds the unit's
elapsed clock ticks with the value retained from its previous measurement,
so recycling a register (measure, re-superpose, measure again) keeps drawing
fresh-looking values. It is not a cryptographic source.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .isa import UnitConstants


# =============================================================================
# DRAW
# =============================================================================

@dataclass(frozen=True)
class Draw:
    """
    Output of Measurer.supply.

    Attributes:
        residue: Small value in [0, period) mapped to the outcome
        retained: Value the unit keeps for its next measurement
    """
    residue: int
    retained: int


# =============================================================================
# ELAPSED CLOCK
# =============================================================================

class ElapsedClock:
    """
    Start/stop tick counter owned by exactly one Unit.

    Elapsed time accumulates across start/stop cycles, in nanoseconds.
    """

    def __init__(self):
        self._elapsed = 0
        self._started: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._started is not None

    def start(self) -> None:
        if self._started is None:
            self._started = time.perf_counter_ns()

    def stop(self) -> None:
        if self._started is not None:
            self._elapsed += time.perf_counter_ns() - self._started
            self._started = None

    @property
    def elapsed(self) -> int:
        """Accumulated ticks, including the running interval."""
        if self._started is None:
            return self._elapsed
        return self._elapsed + time.perf_counter_ns() - self._started


# =============================================================================
# MEASURER INTERFACE
# =============================================================================

class Measurer(ABC):
    """
    Randomness capability injected into a Unit.

    Implementations receive the unit's elapsed ticks, the value it retained
    from its previous measurement (0 if none) and its register index.
    """

    period: int = UnitConstants.MEASURE_PERIOD

    @abstractmethod
    def supply(self, elapsed: int, prior: int, index: int) -> Draw:
        """Produce the residue and the value to retain."""


class TimingJitterMeasurer(Measurer):
    """
    Default measurer: clock jitter folded with the previous draw.

    Derivation:
        prior == 0 -> retained = integers(SEED_RANGE)
        otherwise  -> retained = prior * elapsed // (index + INDEX_OFFSET)
        residue = retained % period

    Example:
        >>> m = TimingJitterMeasurer(seed=7)
        >>> draw = m.supply(elapsed=12345, prior=0, index=0)
        >>> 0 <= draw.residue < 32
        True
    """

    def __init__(self, seed: Optional[int] = None,
                 period: int = UnitConstants.MEASURE_PERIOD):
        self.period = period
        self._rng = np.random.default_rng(seed)

    def supply(self, elapsed: int, prior: int, index: int) -> Draw:
        if prior == 0:
            retained = int(self._rng.integers(UnitConstants.SEED_RANGE))
        else:
            retained = (prior * elapsed) // (index + UnitConstants.INDEX_OFFSET)
            retained &= UnitConstants.RETAINED_MASK
        return Draw(residue=retained % self.period, retained=retained)


class UniformMeasurer(Measurer):
    """Ignores timing entirely and draws a uniform residue."""

    def __init__(self, seed: Optional[int] = None,
                 period: int = UnitConstants.MEASURE_PERIOD):
        self.period = period
        self._rng = np.random.default_rng(seed)

    def supply(self, elapsed: int, prior: int, index: int) -> Draw:
        residue = int(self._rng.integers(self.period))
        return Draw(residue=residue, retained=residue)


# =============================================================================
# OUTCOME MAPPING
# =============================================================================

def outcome_for(probability_of_zero: float, residue: int) -> int:
    """
    Map a residue to a measurement outcome.

    Mapping:
        0.5  -> residue parity
        0.75 -> 1 when residue % 4 == 1, else 0   (0 three times in four)
        0.25 -> 0 when residue % 4 == 1, else 1
        0/1  -> deterministic

    Returns:
        0 or 1, or -1 for an unsupported magnitude
    """
    if probability_of_zero == 1:
        return 0
    if probability_of_zero == 0:
        return 1
    if probability_of_zero == 0.5:
        return residue % 2
    if probability_of_zero == 0.75:
        return 1 if residue % 4 == 1 else 0
    if probability_of_zero == 0.25:
        return 0 if residue % 4 == 1 else 1
    return -1
