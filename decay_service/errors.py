"""
Decay Simulation Errors

All errors raised by the simulation derive from DecayError so callers can
handle the whole family in a single clause. Each error also derives from the
closest built-in exception, so code written against ValueError or
RuntimeError keeps working.
"""

from typing import Any, Optional


class DecayError(Exception):
    """Base class for orbital decay simulation errors."""


class InvalidParameterError(DecayError, ValueError):
    """A supplied physical parameter is non-physical."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class ModelDivergenceError(DecayError, ArithmeticError):
    """
    The decay model left its valid envelope.

    Raised when the denominator of the scale-height fit is non-positive, which
    happens only far above the model ceiling. Also raised when a single step's
    period decrement would consume the whole orbital period; denominator is
    None in that case.
    """

    def __init__(self, altitude_km: float, denominator: Optional[float] = None,
                 message: Optional[str] = None):
        self.altitude_km = altitude_km
        self.denominator = denominator
        if message is None:
            message = (
                f"Scale height diverged at {altitude_km:.3f} km "
                f"(denominator {denominator})"
            )
        super().__init__(message)


class NonConvergenceError(DecayError, RuntimeError):
    """The simulation hit its elapsed-time cap before re-entry."""

    def __init__(self, elapsed_days: float, altitude_km: float, max_elapsed_days: float):
        self.elapsed_days = elapsed_days
        self.altitude_km = altitude_km
        self.max_elapsed_days = max_elapsed_days
        super().__init__(
            f"No re-entry after {elapsed_days:.1f} days "
            f"(limit {max_elapsed_days:.1f} days, altitude {altitude_km:.3f} km)"
        )
