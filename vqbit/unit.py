"""
Virtual Qubit Unit
==================

The state machine at the heart of VQBit.

Physical Model:
    - Ket (a, b): AmplitudePair, probabilities snapped to {0, .25, .5, .75, 1}
    - Phase: PhaseAccumulator, exact dyadic fraction of a turn
    - Entanglement: weak link to another Unit plus an orientation

Lifecycle:
    ACTIVE (clock running) -> MEASURING (clock stopped) -> INACTIVE (collapsed)
    Any successful gate re-enters ACTIVE.

Transition rule:
    ESP, CNOT  invalid at 0.25 / 0.75
    JTS        invalid at 0 / 1
    TSC        invalid at 0.5
    PXG, PZG   always valid
"""

import logging
import time
import weakref
from typing import Optional, Tuple, List, Union

import numpy as np

from .isa import UnitConstants, BasisState, OpCode, GATES, format_ket, settle_delay
from .amplitude import AmplitudePair
from .phase import PhaseAccumulator
from .measurer import Measurer, TimingJitterMeasurer, ElapsedClock, outcome_for
from . import gates


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


# Gates forbidden per magnitude
_FORBIDDEN = {
    0.25: {OpCode.ESP, OpCode.CNOT},
    0.75: {OpCode.ESP, OpCode.CNOT},
    0.0: {OpCode.JTS},
    1.0: {OpCode.JTS},
    0.5: {OpCode.TSC},
}


class Unit:
    """
    A single virtual qubit.

    Gates return True on success. On failure they log a warning, leave the
    amplitudes untouched and do not activate the unit.

    Example:
        >>> q = Unit(0, settle=0)
        >>> q.esp()
        True
        >>> q.probability_of_zero
        0.5
        >>> q.measure() in (0, 1)
        True
    """

    def __init__(self,
                 initial: int = BasisState.ZERO,
                 index: int = 0,
                 size: int = 1,
                 measurer: Optional[Measurer] = None,
                 settle: Optional[float] = None):
        """
        Create a unit in a definite basis state.

        Args:
            initial: 0 -> (1, 0), 1 -> (0, 1), -1 -> (0, -1)
            index: Position in the owning register (feeds the measurer)
            size: Register size (sizes the phase slots)
            measurer: Randomness source (default: TimingJitterMeasurer)
            settle: Construction pause in seconds (default: settle_delay())

        Raises:
            ValueError: invalid initial state, register size or index
        """
        if not UnitConstants.MIN_REGISTER_SIZE <= size <= UnitConstants.MAX_REGISTER_SIZE:
            raise ValueError(
                f"Invalid register size {size}: must be in "
                f"[{UnitConstants.MIN_REGISTER_SIZE}, {UnitConstants.MAX_REGISTER_SIZE}]"
            )
        if not 0 <= index < size:
            raise ValueError(f"Invalid index {index}: must be in [0, {size})")

        self.index = index
        self.size = size
        self.measurer = measurer if measurer is not None else TimingJitterMeasurer()

        self._amplitudes = AmplitudePair(*BasisState.ket(initial))
        self._phase = PhaseAccumulator(size)
        self._valid = True
        self._active = False
        self._partner: Optional[weakref.ref] = None
        self._same = True
        self._retained = 0
        self._clock = ElapsedClock()

        self._set_active()
        pause = settle_delay() if settle is None else settle
        if pause > 0:
            time.sleep(pause)

    # =========================================================================
    # ACTIVATION
    # =========================================================================

    def _set_active(self) -> None:
        if self._active:
            return
        self._active = True
        self._clock.start()

    def _set_inactive(self) -> None:
        self._active = False

    def activate(self) -> None:
        """Re-enter superposition bookkeeping (restarts the clock)."""
        self._set_active()

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def probability_of_zero(self) -> float:
        return self._amplitudes.probability_of_zero

    @property
    def sign_a(self) -> int:
        return self._amplitudes.sign_a

    @property
    def sign_b(self) -> int:
        return self._amplitudes.sign_b

    @property
    def amplitudes(self) -> Tuple[float, float]:
        return self._amplitudes.a, self._amplitudes.b

    @property
    def valid(self) -> bool:
        """False while entangled: the outcome is delegated."""
        return self._valid

    @property
    def active(self) -> bool:
        return self._active

    @property
    def is_entangled(self) -> bool:
        return self._partner is not None

    @property
    def partner(self) -> Optional["Unit"]:
        return self._partner() if self._partner is not None else None

    @property
    def same_orientation(self) -> bool:
        return self._same

    @property
    def phase(self) -> PhaseAccumulator:
        return self._phase

    def describe_phase(self) -> Tuple[int, List[int]]:
        """(base, present_indices) of the accumulated phase."""
        return self._phase.base, self._phase.present_indices()

    def discriminant(self) -> gates.Discriminant:
        """(magnitude, sign agreement, phase parity) used by JTS and TSC."""
        return (self.probability_of_zero,
                self.sign_a == self.sign_b,
                self._phase.sign())

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def is_valid_transition(self, gate: Union[OpCode, str]) -> bool:
        """Check a gate against the current magnitude."""
        if isinstance(gate, str):
            gate = OpCode.__members__.get(gate.upper())
        if gate not in GATES:
            logger.warning(f"is_valid_transition: invalid gate {gate}")
            return False
        return gate not in _FORBIDDEN.get(self.probability_of_zero, set())

    def gate_matrix(self, gate: OpCode) -> Optional[np.ndarray]:
        """
        Matrix the gate would apply in the current state.

        Returns:
            2x2 numpy array, or None if the transition is invalid
        """
        if gate == OpCode.CNOT or not self.is_valid_transition(gate):
            return None
        if gate == OpCode.ESP:
            return gates.ESP_MATRIX
        if gate == OpCode.PXG:
            return gates.PXG_MATRIX
        if gate == OpCode.PZG:
            return gates.PZG_MATRIX

        table = gates.JTS_TABLE if gate == OpCode.JTS else gates.TSC_TABLE
        discriminant = self.discriminant()
        if gate == OpCode.JTS and discriminant[0] == 0.5 and discriminant[2] < 0:
            logger.debug(f"JTS: odd phase base, sign_a={self.sign_a} sign_b={self.sign_b}")
        return gates.select(table, discriminant)

    def _transform(self, gate: OpCode) -> bool:
        matrix = self.gate_matrix(gate)
        if matrix is None:
            logger.warning(
                f"Invalid transition gate: {gate.name} - a = {self._amplitudes.a}"
            )
            return False
        a, b = matrix @ self._amplitudes.as_vector()
        if self._amplitudes.mutate(a, b):
            self._set_active()
            return True
        return False

    # =========================================================================
    # GATES
    # =========================================================================

    def esp(self) -> bool:
        """Equal superposition (Hadamard): ((a+b)/sqrt2, (a-b)/sqrt2)."""
        return self._transform(OpCode.ESP)

    def pxg(self) -> bool:
        """Pauli X: swap a and b."""
        return self._transform(OpCode.PXG)

    def pzg(self) -> bool:
        """Pauli Z: negate b."""
        return self._transform(OpCode.PZG)

    def jts(self) -> bool:
        """Move between equal superposition and the 0.75 / 0.25 states."""
        return self._transform(OpCode.JTS)

    def tsc(self) -> bool:
        """Move between the 0.75 / 0.25 states and a definite 0 / 1."""
        return self._transform(OpCode.TSC)

    def shift_phase(self, val: int) -> bool:
        """Add 1/2^val of a turn to the relative phase."""
        return self._phase.shift_phase(val)

    def cnot(self, control: "Unit") -> bool:
        """
        Controlled NOT with this unit as target.

        Control states:
            definite 1 (p0 == 0)  -> PXG on self
            definite 0 (p0 == 1)  -> nothing to do
            equal superposition   -> phase kickback: PZG on the control
                                     when this unit's b is negative
            0.75 / 0.25           -> unsupported, rejected
        """
        state = control.probability_of_zero
        if state == 0:
            if not self.is_valid_transition(OpCode.CNOT):
                logger.warning(
                    f"Invalid transition gate: CNOT - a = {self._amplitudes.a}"
                )
                return False
            return self.pxg()
        if state == 1:
            return True
        if state == 0.5:
            if self.sign_b < 0:
                return control.pzg()
            return True
        logger.warning(f"CNOT: unsupported control state {state}")
        return False

    # =========================================================================
    # ENTANGLEMENT
    # =========================================================================

    def set_entangled(self, other: Optional["Unit"], same: bool = True) -> bool:
        """
        Make this unit's outcome follow another unit.

        Args:
            other: Independently valid unit to follow
            same: True -> same value, False -> opposite value
        """
        if other is None or other is self or not other.valid:
            logger.warning("set_entangled: source is not an independently valid unit")
            return False
        self._partner = weakref.ref(other)
        self._same = same
        self._valid = False
        return True

    def disentangle(self) -> None:
        if self._partner is not None:
            self._partner = None
            self._valid = True

    # =========================================================================
    # MEASUREMENT
    # =========================================================================

    def measure(self) -> int:
        """
        Collapse the unit.

        Returns:
            0 or 1
        """
        if self._partner is not None:
            other = self._partner()
            if other is not None:
                outcome = other.measure()
                return outcome if self._same else 1 - outcome
            logger.warning(f"measure: unit {self.index} lost its entangled partner")
            self.disentangle()

        state = self.probability_of_zero
        if state in (0, 1):
            return int(1 - state)

        self._clock.stop()
        self._set_inactive()
        draw = self.measurer.supply(self._clock.elapsed, self._retained, self.index)
        self._retained = draw.retained
        outcome = outcome_for(state, draw.residue)
        self._amplitudes.mutate(1 - outcome, outcome)
        return outcome

    # =========================================================================
    # UTILITY
    # =========================================================================

    def ket(self) -> str:
        """State in ket notation, e.g. (0.75, -0.25)."""
        return format_ket(self.probability_of_zero, self.sign_a, self.sign_b)

    def __repr__(self) -> str:
        flags = []
        if self._active:
            flags.append("active")
        if self.is_entangled:
            flags.append("same" if self._same else "opposite")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"Unit({self.index}: {self.ket()} {self._phase}){suffix}"


# =============================================================================
# CONVENIENCE
# =============================================================================

def new_unit(initial: int,
             index: int = 0,
             size: int = 1,
             measurer: Optional[Measurer] = None,
             settle: Optional[float] = None) -> Optional[Unit]:
    """
    Create a unit, reporting bad arguments instead of raising.

    Returns:
        The Unit, or None (logged) if the arguments are invalid
    """
    try:
        return Unit(initial, index, size, measurer, settle)
    except ValueError as e:
        logger.error(f"new_unit: {e}")
        return None
