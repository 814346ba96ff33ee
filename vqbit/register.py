"""
VQBit Register
==============

An index-addressable bank of Units.

Architecture:
    - Each Unit is independent (no joint state vector)
    - Addressing via integer index (0 to size-1)
    - CNOT and ENTANGLE link two named units
    - Every unit's phase slots are sized to the register

Example:
    >>> reg = create_register(4, settle=0)
    >>> reg.apply(OpCode.ESP, 0)
    True
    >>> reg.entangle(1, 0, same=False)
    True
    >>> bits = reg.measure_all()
    >>> bits[0] != bits[1]
    True
"""

import logging
from typing import List, Optional, Dict, Any, Sequence, Union

import numpy as np

from .isa import UnitConstants, OpCode, SINGLE_UNIT_GATES
from .measurer import Measurer, TimingJitterMeasurer
from .unit import Unit


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class AddressError(Exception):
    """Raised when accessing an invalid register address."""
    pass


# =============================================================================
# REGISTER
# =============================================================================

class Register:
    """
    An ordered register of Units.

    All units share one measurer unless a different one is injected per
    unit. Gate failures are reported by the units and surface here as False;
    only bad addresses raise.
    """

    def __init__(self,
                 size: int,
                 initial: Union[int, Sequence[int]] = 0,
                 measurer: Optional[Measurer] = None,
                 settle: Optional[float] = None):
        """
        Initialize a register.

        Args:
            size: Number of units (1..100)
            initial: Basis state for every unit, or one per unit
            measurer: Shared randomness source
            settle: Per-unit construction pause in seconds
        """
        if not UnitConstants.MIN_REGISTER_SIZE <= size <= UnitConstants.MAX_REGISTER_SIZE:
            raise ValueError(
                f"Cannot allocate {size} units. "
                f"Size must be in [{UnitConstants.MIN_REGISTER_SIZE}, "
                f"{UnitConstants.MAX_REGISTER_SIZE}]."
            )

        if isinstance(initial, int):
            values = [initial] * size
        else:
            values = list(initial)
            if len(values) != size:
                raise ValueError(f"Expected {size} initial values, got {len(values)}")

        self.size = size
        self.measurer = measurer if measurer is not None else TimingJitterMeasurer()
        self.units: List[Unit] = [
            Unit(value, index=i, size=size, measurer=self.measurer, settle=settle)
            for i, value in enumerate(values)
        ]

        self._op_log: List[Dict[str, Any]] = []

    def _validate_address(self, address: int) -> None:
        if not 0 <= address < self.size:
            raise AddressError(
                f"Address {address} out of range [0, {self.size})"
            )

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, address: int) -> Unit:
        self._validate_address(address)
        return self.units[address]

    def __iter__(self):
        return iter(self.units)

    # =========================================================================
    # GATES
    # =========================================================================

    def apply(self, op: OpCode, address: int) -> bool:
        """
        Apply a single-unit gate (ESP, PXG, PZG, JTS, TSC).

        Returns:
            The unit's success flag
        """
        self._validate_address(address)
        if op not in SINGLE_UNIT_GATES:
            raise ValueError(f"{op} is not a single-unit gate")

        unit = self.units[address]
        ok = getattr(unit, op.name.lower())()
        self._op_log.append({"op": op.name, "addr": address, "ok": ok})
        return ok

    def cnot(self, control: int, target: int) -> bool:
        self._validate_address(control)
        self._validate_address(target)
        if control == target:
            raise ValueError("Cannot CNOT a unit with itself")

        ok = self.units[target].cnot(self.units[control])
        self._op_log.append({"op": "CNOT", "control": control, "target": target, "ok": ok})
        return ok

    def shift_phase(self, address: int, value: int) -> bool:
        self._validate_address(address)
        ok = self.units[address].shift_phase(value)
        self._op_log.append({"op": "SHIFT", "addr": address, "value": value, "ok": ok})
        return ok

    def shift_all(self, delta: int) -> bool:
        """Shift the phase of every unit by 1/2^delta of a turn."""
        results = [unit.shift_phase(delta) for unit in self.units]
        self._op_log.append({"op": "SHIFT_ALL", "value": delta})
        return all(results)

    # =========================================================================
    # ENTANGLEMENT
    # =========================================================================

    def entangle(self, address: int, source: int, same: bool = True) -> bool:
        """
        Make unit `address` follow unit `source`.

        Args:
            address: Follower unit
            source: Driving unit (must be independently valid)
            same: True for same value, False for opposite
        """
        self._validate_address(address)
        self._validate_address(source)
        ok = self.units[address].set_entangled(self.units[source], same)
        self._op_log.append({
            "op": "ENTANGLE", "addr": address, "source": source,
            "same": same, "ok": ok,
        })
        return ok

    def disentangle(self, address: int) -> None:
        self._validate_address(address)
        self.units[address].disentangle()
        self._op_log.append({"op": "DISENTANGLE", "addr": address})

    def activate(self, address: int) -> None:
        self._validate_address(address)
        self.units[address].activate()

    # =========================================================================
    # MEASUREMENT
    # =========================================================================

    def measure(self, address: int) -> int:
        self._validate_address(address)
        return self.units[address].measure()

    def measure_all(self) -> List[int]:
        """Measure every unit in address order."""
        return [unit.measure() for unit in self.units]

    def probabilities(self) -> np.ndarray:
        """Probability of measuring 0, per unit."""
        return np.array([unit.probability_of_zero for unit in self.units])

    # =========================================================================
    # UTILITY
    # =========================================================================

    def describe(self) -> List[str]:
        """Every unit in ket notation."""
        return [unit.ket() for unit in self.units]

    def phases(self) -> List[str]:
        return [str(unit.phase) for unit in self.units]

    def dump(self) -> Dict[str, Any]:
        """Dump register state for debugging."""
        return {
            "size": self.size,
            "units": [
                {
                    "index": u.index,
                    "ket": u.ket(),
                    "amplitudes": u.amplitudes,
                    "phase": u.describe_phase(),
                    "active": u.active,
                    "entangled": u.is_entangled,
                }
                for u in self.units
            ],
            "op_log": self._op_log,
        }

    def __repr__(self) -> str:
        return f"Register([{' '.join(self.describe())}])"


# =============================================================================
# CONVENIENCE
# =============================================================================

def create_register(size: int,
                    initial: Union[int, Sequence[int]] = 0,
                    measurer: Optional[Measurer] = None,
                    settle: Optional[float] = None) -> Register:
    """Create a new register of units in basis states."""
    return Register(size, initial, measurer, settle)


def fourier_transform(values: Sequence[int],
                      measurer: Optional[Measurer] = None,
                      settle: Optional[float] = None) -> Optional[Register]:
    """
    Quantum Fourier Transform over a register initialised to `values`.

    For each unit i < n-1: ESP, then for every later unit j holding a
    definite 1, shift unit i by 1/2^(j - i + 1) of a turn. The last unit is
    left untouched.

    Returns:
        The transformed register, or None (logged) for sizes outside 2..100
    """
    size = len(values)
    if not 2 <= size <= UnitConstants.MAX_REGISTER_SIZE:
        logger.error(f"fourier_transform: invalid register size {size}")
        return None

    reg = Register(size, values, measurer, settle)
    for i in range(size - 1):
        reg.apply(OpCode.ESP, i)
        for j in range(i + 1, size):
            if reg[j].probability_of_zero == 0:
                reg.shift_phase(i, j - i + 1)
    return reg
