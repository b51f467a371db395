"""
Orbital Decay Simulator

Estimates the decay of an essentially circular low-Earth orbit under
atmospheric drag and reports the time to re-entry.

The orbit is advanced in fixed time steps of 0.1 day. Each step:
- computes the local density from the empirical atmosphere model
- derives the orbital period lost to drag over the step
- updates the period, then re-derives radius and altitude from it via
  Kepler's third law

Radius is never integrated on its own, so period and radius always stay
consistent with each other. A sample is emitted roughly every 10 km of
altitude loss, and the run ends once the altitude drops below 180 km, where
re-entry is considered imminent.

Decay rate is reported in rev/day^2, the same unit as the first derivative of
mean motion in Two-Line Element sets.

References:
    IPS Radio and Space Services (1999). Satellite Orbital Decay Calculations.
    King-Hele, D. (1987). Satellite Orbits in an Atmosphere: Theory and
    Applications. Blackie.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Tuple

import config
from decay_service.atmosphere import atmospheric_density
from decay_service.errors import (
    InvalidParameterError,
    ModelDivergenceError,
    NonConvergenceError,
)

logger = logging.getLogger(__name__)

_DEFAULT_MAX_DAYS = object()


@dataclass(frozen=True)
class SimulationParameters:
    """Physical inputs of a single decay simulation."""

    mass: float  # kg
    area: float  # m^2
    initial_altitude_km: float
    solar_flux: float  # F10.7, SFU
    ap_index: float

    @property
    def area_to_mass(self) -> float:
        """Ballistic coefficient (m^2/kg)."""
        return self.area / self.mass

    def validate(self) -> None:
        """
        Check that every parameter is physical.

        Raises:
            InvalidParameterError: Naming the first offending field.
        """
        for field in ("mass", "area", "initial_altitude_km", "solar_flux", "ap_index"):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameterError(field, value, "must be a number")
            if not math.isfinite(value):
                raise InvalidParameterError(field, value, "must be finite")

        if self.mass <= 0:
            raise InvalidParameterError("mass", self.mass, "must be > 0 kg")
        if self.area <= 0:
            raise InvalidParameterError("area", self.area, "must be > 0 m^2")
        if self.initial_altitude_km <= config.REENTRY_ALTITUDE_KM:
            raise InvalidParameterError(
                "initial_altitude_km",
                self.initial_altitude_km,
                f"must be above the {config.REENTRY_ALTITUDE_KM:g} km re-entry floor",
            )
        if self.solar_flux <= 0:
            raise InvalidParameterError("solar_flux", self.solar_flux, "must be > 0 SFU")
        if self.ap_index < 0:
            raise InvalidParameterError("ap_index", self.ap_index, "must be >= 0")


@dataclass(frozen=True)
class SimulationState:
    """Orbit state at one instant of the simulation."""

    elapsed_days: float
    orbital_radius_m: float
    altitude_km: float
    orbital_period_s: float


@dataclass(frozen=True)
class SampleRecord:
    """One emitted row of the decay trajectory."""

    elapsed_days: float
    altitude_km: float
    orbital_period_minutes: float
    mean_motion_rev_per_day: float
    decay_rate_rev_per_day2: float

    def as_row(self) -> Tuple[float, float, float, float, float]:
        """Values in report column order."""
        return (
            self.elapsed_days,
            self.altitude_km,
            self.orbital_period_minutes,
            self.mean_motion_rev_per_day,
            self.decay_rate_rev_per_day2,
        )


class SimulationResult(NamedTuple):
    """Full trajectory and time to re-entry."""

    samples: List[SampleRecord]
    days_to_reentry: float


def period_from_radius(radius_m: float) -> float:
    """Circular orbital period (s) for a given radius (m)."""
    return 2.0 * math.pi * math.sqrt(
        radius_m ** 3 / (config.EARTH_MASS * config.GRAVITATIONAL_CONSTANT)
    )


def radius_from_period(period_s: float) -> float:
    """Circular orbital radius (m) for a given period (s)."""
    return (
        config.GRAVITATIONAL_CONSTANT * config.EARTH_MASS * period_s ** 2
        / (4.0 * math.pi ** 2)
    ) ** (1.0 / 3.0)


def initial_state(altitude_km: float) -> SimulationState:
    """State at t=0 for a circular orbit at the given altitude."""
    radius = config.EARTH_RADIUS + altitude_km * 1000.0
    return SimulationState(
        elapsed_days=0.0,
        orbital_radius_m=radius,
        altitude_km=altitude_km,
        orbital_period_s=period_from_radius(radius),
    )


def period_decrement(state: SimulationState, parameters: SimulationParameters) -> float:
    """
    Orbital period lost to drag over one time step.

    dP = 3 pi (A/m) R rho dt

    Args:
        state: Current orbit state
        parameters: Satellite and space-weather parameters

    Returns:
        Period decrement (s)

    Raises:
        ModelDivergenceError: If the atmosphere model is outside its envelope.
    """
    density = atmospheric_density(
        state.altitude_km, parameters.solar_flux, parameters.ap_index
    )
    step_seconds = config.TIME_STEP_DAYS * config.SECONDS_PER_DAY
    return (
        3.0 * math.pi * parameters.area_to_mass
        * state.orbital_radius_m * density * step_seconds
    )


def advance(state: SimulationState, decrement_s: float) -> SimulationState:
    """
    Apply one step's period decrement and re-derive radius and altitude.

    Raises:
        ModelDivergenceError: If the decrement consumes the whole orbital
            period. This needs a non-physical ballistic coefficient and is the
            only divergence not caused by the scale-height fit.
    """
    period = state.orbital_period_s - decrement_s
    if period <= 0:
        raise ModelDivergenceError(
            state.altitude_km,
            message=f"Period decrement {decrement_s:.3f} s exceeds the orbital period",
        )
    radius = radius_from_period(period)
    return SimulationState(
        elapsed_days=state.elapsed_days + config.TIME_STEP_DAYS,
        orbital_radius_m=radius,
        altitude_km=(radius - config.EARTH_RADIUS) / 1000.0,
        orbital_period_s=period,
    )


def sample_record(state: SimulationState, decrement_s: float) -> SampleRecord:
    """Build the report row for a state and its current period decrement."""
    period_minutes = state.orbital_period_s / 60.0
    mean_motion = config.MINUTES_PER_DAY / period_minutes
    decay_rate = decrement_s / config.TIME_STEP_DAYS / state.orbital_period_s * mean_motion
    return SampleRecord(
        elapsed_days=state.elapsed_days,
        altitude_km=state.altitude_km,
        orbital_period_minutes=period_minutes,
        mean_motion_rev_per_day=mean_motion,
        decay_rate_rev_per_day2=decay_rate,
    )


class DecaySimulator:
    """
    Drag-driven decay of a single circular orbit.

    A simulator owns its state exclusively and runs once. Iterate samples()
    to pull the trajectory lazily; stopping early is enough to cancel.

    Example:
        simulator = DecaySimulator(parameters)
        for record in simulator.samples():
            print(record.elapsed_days, record.altitude_km)
        print(simulator.days_to_reentry)
    """

    def __init__(self, parameters: SimulationParameters,
                 sample_interval_km: float = config.DEFAULT_SAMPLE_INTERVAL_KM,
                 max_elapsed_days=_DEFAULT_MAX_DAYS):
        """
        Initialize the simulator.

        Args:
            parameters: Satellite and space-weather parameters
            sample_interval_km: Altitude loss between emitted samples (km)
            max_elapsed_days: Simulated-time cap in days, None for no cap.
                Defaults to config.MAX_ELAPSED_DAYS.

        Raises:
            InvalidParameterError: If any parameter is non-physical.
        """
        parameters.validate()

        if (isinstance(sample_interval_km, bool)
                or not isinstance(sample_interval_km, numbers.Real)
                or not math.isfinite(sample_interval_km)
                or sample_interval_km <= 0):
            raise InvalidParameterError(
                "sample_interval_km", sample_interval_km, "must be a positive number"
            )

        if max_elapsed_days is _DEFAULT_MAX_DAYS:
            max_elapsed_days = config.MAX_ELAPSED_DAYS
        if max_elapsed_days is not None and not max_elapsed_days > 0:
            raise InvalidParameterError(
                "max_elapsed_days", max_elapsed_days, "must be > 0 or None"
            )

        self.parameters = parameters
        self.sample_interval_km = float(sample_interval_km)
        self.max_elapsed_days: Optional[float] = max_elapsed_days
        self.state = initial_state(float(parameters.initial_altitude_km))
        self.days_to_reentry: Optional[float] = None
        self._started = False

    def steps(self) -> Iterator[Tuple[SimulationState, float]]:
        """
        Advance the orbit step by step.

        Yields:
            (state, period decrement) for every state up to and including the
            one that fell below the re-entry floor. The decrement is the one
            computed for that state.

        Raises:
            ModelDivergenceError: If the atmosphere model diverges or a step
                consumes the whole orbital period.
            NonConvergenceError: If the elapsed-time cap is reached.
            RuntimeError: If the simulator has already been run.
        """
        if self._started:
            raise RuntimeError("DecaySimulator can only be run once")
        self._started = True

        logger.debug(
            f"Starting decay run: mass={self.parameters.mass} kg "
            f"area={self.parameters.area} m^2 "
            f"h0={self.parameters.initial_altitude_km} km "
            f"F10.7={self.parameters.solar_flux} Ap={self.parameters.ap_index}"
        )

        while True:
            decrement = period_decrement(self.state, self.parameters)
            yield self.state, decrement

            if self.state.altitude_km < config.REENTRY_ALTITUDE_KM:
                break

            if (self.max_elapsed_days is not None
                    and self.state.elapsed_days >= self.max_elapsed_days):
                logger.warning(
                    f"Decay run capped at {self.state.elapsed_days:.1f} days "
                    f"with altitude {self.state.altitude_km:.3f} km"
                )
                raise NonConvergenceError(
                    self.state.elapsed_days, self.state.altitude_km, self.max_elapsed_days
                )

            self.state = advance(self.state, decrement)

        self.days_to_reentry = self.state.elapsed_days
        logger.debug(f"Re-entry after {self.days_to_reentry:.1f} days")

    def samples(self) -> Iterator[SampleRecord]:
        """
        Sampled decay trajectory.

        A record is emitted whenever the altitude reaches the next sampling
        threshold, starting at the initial altitude and counting down by the
        sampling interval.

        Yields:
            SampleRecord in strictly increasing elapsed time

        Returns:
            Days to re-entry, as the generator's return value
        """
        threshold = self.state.altitude_km

        for state, decrement in self.steps():
            if state.altitude_km <= threshold:
                record = sample_record(state, decrement)
                logger.debug(
                    f"t={record.elapsed_days:8.1f}d h={record.altitude_km:8.3f}km "
                    f"n={record.mean_motion_rev_per_day:.6f}rev/d"
                )
                yield record
                threshold -= self.sample_interval_km

        return self.days_to_reentry


def simulate(parameters: SimulationParameters,
             sample_interval_km: float = config.DEFAULT_SAMPLE_INTERVAL_KM,
             max_elapsed_days=_DEFAULT_MAX_DAYS) -> SimulationResult:
    """
    Run a decay simulation to completion.

    Use DecaySimulator.samples() directly to consume the trajectory lazily.

    Args:
        parameters: Satellite and space-weather parameters
        sample_interval_km: Altitude loss between emitted samples (km)
        max_elapsed_days: Simulated-time cap in days, None for no cap

    Returns:
        SimulationResult with all samples and the days to re-entry

    Raises:
        InvalidParameterError: If any parameter is non-physical.
        ModelDivergenceError: If the atmosphere model diverges or a step
            consumes the whole orbital period.
        NonConvergenceError: If the elapsed-time cap is reached.
    """
    simulator = DecaySimulator(
        parameters,
        sample_interval_km=sample_interval_km,
        max_elapsed_days=max_elapsed_days,
    )
    samples = list(simulator.samples())
    return SimulationResult(samples, simulator.days_to_reentry)
