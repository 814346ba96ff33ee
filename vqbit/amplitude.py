"""
Amplitude Pair
==============

The ket (a, b) held by every Unit.

Only five probabilities are representable: a^2 is snapped to the nearest of
{0, 0.25, 0.5, 0.75, 1}. The amplitudes produced by the gate set
(1, 1/sqrt(2), sqrt(3)/2, 1/2) never square to those values exactly, so the
snap absorbs floating point residue instead of letting 0.4999999 leak out.
"""

import logging

import numpy as np

from .isa import UnitConstants


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


class AmplitudePair:
    """
    A validated (a, b) amplitude pair.

    Invariant:
        magnitude_squared(a) + magnitude_squared(b) == 1

    A failed construction or mutation never raises. It is logged, the pair
    is marked invalid and the previous amplitudes stay in place.

    Example:
        >>> pair = AmplitudePair(1, 0)
        >>> pair.mutate(2 ** -0.5, 2 ** -0.5)
        True
        >>> pair.probability_of_zero
        0.5
    """

    def __init__(self, a: float, b: float):
        self.a = 0.0
        self.b = 0.0
        self.valid = False

        if self.magnitude_squared(a) + self.magnitude_squared(b) != 1:
            logger.error(f"AmplitudePair: invalid value a={a}, b={b}")
        else:
            self.mutate(a, b)

    @staticmethod
    def magnitude_squared(x: float) -> float:
        """
        Snap x^2 to the supported magnitude set.

        Returns:
            One of UnitConstants.MAGNITUDES, or INVALID_MAGNITUDE (-1)
        """
        square = x * x
        for magnitude in UnitConstants.MAGNITUDES:
            if np.isclose(square, magnitude, rtol=0.0, atol=UnitConstants.EPSILON):
                return magnitude
        logger.warning(f"magnitude_squared: unsupported value x={x}, x^2={square}")
        return UnitConstants.INVALID_MAGNITUDE

    def mutate(self, a_new: float, b_new: float) -> bool:
        """
        Replace both amplitudes if the new pair is normalised.

        Every gate calls this and must check the return value before
        declaring its unit active.
        """
        a2 = self.magnitude_squared(a_new)
        b2 = self.magnitude_squared(b_new)
        if a2 + b2 != 1:
            logger.warning(
                f"mutate: invalid values a={a_new}, b={b_new} "
                f"(a^2={a2}, b^2={b2})"
            )
            self.valid = False
            return False

        # Exact zero keeps the sign queries stable
        self.a = 0.0 if a2 == 0 else float(a_new)
        self.b = 0.0 if b2 == 0 else float(b_new)
        self.valid = True
        return True

    @property
    def probability_of_zero(self) -> float:
        """Probability that a measurement yields 0."""
        return self.magnitude_squared(self.a)

    @property
    def sign_a(self) -> int:
        return -1 if self.a < 0 else 1

    @property
    def sign_b(self) -> int:
        return -1 if self.b < 0 else 1

    def as_vector(self) -> np.ndarray:
        """The pair as a numpy vector [a, b]."""
        return np.array([self.a, self.b], dtype=float)

    def __iter__(self):
        yield self.a
        yield self.b

    def __repr__(self) -> str:
        flag = "" if self.valid else ", invalid"
        return f"AmplitudePair({self.a:.6f}, {self.b:.6f}{flag})"
