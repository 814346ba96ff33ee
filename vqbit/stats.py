"""
Randomness Statistics
=====================

Exercises registers the way a user of the simulator would: superpose,
measure, recycle, repeat, and check the collapse statistics.

Features:
    - Zero-frequency statistics per value set and per unit
    - Duplicate value set detection across samples
    - Entanglement agreement check (same / opposite orientations)
    - Experiment logging and JSON export
"""

import os
import json
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Any
from dataclasses import dataclass, field
import numpy as np

from .isa import UnitConstants
from .measurer import Measurer
from .register import Register


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# =============================================================================
# VALUE SET
# =============================================================================

@dataclass(frozen=True)
class ValueSet:
    """One measurement of a whole register."""
    bits: Tuple[int, ...]

    @property
    def zero_fraction(self) -> float:
        """Share of zeros in the set (~0.5 from equal superposition)."""
        if not self.bits:
            return 0.0
        return self.bits.count(0) / len(self.bits)

    def find_duplicate(self, previous: Sequence["ValueSet"]) -> int:
        """
        Index of the first identical earlier set.

        Returns:
            Index into `previous`, or -1 when unique
        """
        for i, other in enumerate(previous):
            if other.bits == self.bits:
                return i
        return -1

    def __str__(self) -> str:
        # Groups of 8 for readability
        text = "".join(str(b) for b in self.bits)
        return " ".join(text[i:i + 8] for i in range(0, len(text), 8))


# =============================================================================
# RESULT CONTAINER
# =============================================================================

@dataclass
class RandomGenReport:
    """
    Container for a randomness run.

    Attributes:
        size: Register size
        samples: Number of value sets measured
        mode: "equal" (0.5) or "skewed" (0.75)
        expected_zero: Probability of 0 the units were prepared with
        duplicates: (sample, earlier_sample) pairs of identical value sets
        mean_zero: Mean zero fraction over all value sets
        min_zero: Lowest zero fraction in one value set
        max_zero: Highest zero fraction in one value set
        per_unit_zero: Zero frequency per unit
        z_score: Deviation of mean_zero from expected_zero in standard errors
        values: Every measured value set
    """
    size: int
    samples: int
    mode: str
    expected_zero: float
    duplicates: List[Tuple[int, int]]
    mean_zero: float
    min_zero: float
    max_zero: float
    per_unit_zero: List[float]
    z_score: float = 0.0
    values: List[ValueSet] = field(default_factory=list, repr=False)

    def __str__(self) -> str:
        return (
            f"RandomGenReport({self.mode}, {self.size} units x {self.samples} samples)\n"
            f"  Duplicate value sets: {len(self.duplicates)}\n"
            f"  Zero frequency: mean {self.mean_zero:.4f} "
            f"(min {self.min_zero:.4f}, max {self.max_zero:.4f}), "
            f"expected {self.expected_zero}\n"
            f"  Z-Score: {self.z_score:.2f}σ"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "samples": self.samples,
            "mode": self.mode,
            "expected_zero": self.expected_zero,
            "duplicates": [list(d) for d in self.duplicates],
            "mean_zero": self.mean_zero,
            "min_zero": self.min_zero,
            "max_zero": self.max_zero,
            "per_unit_zero": self.per_unit_zero,
            "z_score": self.z_score,
            "zero_fractions": [v.zero_fraction for v in self.values],
        }


# =============================================================================
# RANDOMNESS RUN
# =============================================================================

def _prepare(reg: Register, equal: bool) -> None:
    for unit in reg:
        unit.esp()
        if not equal:
            unit.jts()


def _recycle(reg: Register, equal: bool) -> None:
    """Put collapsed units back into their superposition."""
    for unit in reg:
        if equal:
            unit.esp()
        else:
            if unit.probability_of_zero == 0:
                unit.pxg()
            unit.tsc()


def run_measurements(size: int,
                     samples: int,
                     equal: bool = True,
                     measurer: Optional[Measurer] = None,
                     settle: Optional[float] = None) -> RandomGenReport:
    """
    Measure a recycled register repeatedly and summarise the outcomes.

    Args:
        size: Register size
        samples: Number of value sets to measure
        equal: True for equal superposition, False for the 0.75 state
        measurer: Randomness source shared by the register
        settle: Per-unit construction pause

    Returns:
        RandomGenReport
    """
    if samples < 1:
        raise ValueError(f"samples must be >= 1, got {samples}")

    reg = Register(size, 0, measurer, settle)
    _prepare(reg, equal)
    expected = 0.5 if equal else 0.75

    values: List[ValueSet] = []
    seen: Dict[Tuple[int, ...], int] = {}
    duplicates: List[Tuple[int, int]] = []

    for i in range(samples):
        value_set = ValueSet(tuple(reg.measure_all()))
        if value_set.bits in seen:
            earlier = seen[value_set.bits]
            duplicates.append((i, earlier))
            logger.info(f"🔁 Duplicated value set: measure {i} identical with {earlier}")
            logger.info(f"   {value_set}")
        else:
            seen[value_set.bits] = i
        values.append(value_set)
        _recycle(reg, equal)

    matrix = np.array([v.bits for v in values], dtype=float)
    zero_fractions = 1.0 - matrix.mean(axis=1)
    per_unit = 1.0 - matrix.mean(axis=0)

    mean_zero = float(zero_fractions.mean())
    std_err = np.sqrt(expected * (1 - expected) / matrix.size)
    z_score = float((mean_zero - expected) / max(std_err, 1e-12))

    report = RandomGenReport(
        size=size,
        samples=samples,
        mode="equal" if equal else "skewed",
        expected_zero=expected,
        duplicates=duplicates,
        mean_zero=mean_zero,
        min_zero=float(zero_fractions.min()),
        max_zero=float(zero_fractions.max()),
        per_unit_zero=[float(p) for p in per_unit],
        z_score=z_score,
        values=values,
    )
    logger.info(f"✅ {report}")
    return report


def verify_balance(report: RandomGenReport, tolerance: float = 0.1) -> Tuple[bool, str]:
    """
    Check that the zero frequency matches the prepared superposition.

    Returns:
        Tuple of (passed, message)
    """
    deviation = abs(report.mean_zero - report.expected_zero)
    if deviation > tolerance:
        return False, f"BIASED: {report.mean_zero:.2%} vs {report.expected_zero:.0%}"
    return True, f"BALANCED ({report.mean_zero:.2%}, {report.z_score:.1f}σ)"


# =============================================================================
# ENTANGLEMENT CHECK
# =============================================================================

def check_entanglement(size: int,
                       measurer: Optional[Measurer] = None,
                       settle: Optional[float] = None) -> Tuple[List[int], List[int]]:
    """
    Entangle a second register to a first one and measure both.

    Even units follow with the same value, odd units with the opposite.

    Returns:
        (first, second) measured value lists
    """
    first = Register(size, 0, measurer, settle)
    second = Register(size, 0, measurer, settle)
    for i in range(size):
        if not second[i].set_entangled(first[i], same=(i % 2 == 0)):
            logger.warning(f"⚠️ set_entangled failed for unit {i}")

    for unit in first:
        unit.esp()
    return first.measure_all(), second.measure_all()


def entanglement_holds(first: Sequence[int], second: Sequence[int]) -> bool:
    """True if even positions agree and odd positions differ."""
    return all(
        (a == b) if i % 2 == 0 else (a != b)
        for i, (a, b) in enumerate(zip(first, second))
    )


# =============================================================================
# EXPERIMENT LOGGER
# =============================================================================

class ExperimentLogger:
    """Logs experiment reports to files."""

    def __init__(self, output_dir: str = "."):
        self.output_dir = output_dir
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def log_report(self, report: RandomGenReport, name: str = "randgen") -> str:
        """Log a single report to JSON."""
        filename = f"{name}_{self.timestamp}.json"
        filepath = os.path.join(self.output_dir, filename)

        data = {
            "timestamp": self.timestamp,
            "period": UnitConstants.MEASURE_PERIOD,
            **report.to_dict(),
        }

        with open(filepath, 'w') as f:
            json.dump(data, f, indent=4)

        logger.info(f"💾 Saved: {filepath}")
        return filepath
