"""
TLE Parameter Source

Derives the starting altitude of a decay simulation from a Two-Line Element
(TLE) set, so a tracked satellite can be analysed without working out its
altitude by hand.

The TLE is parsed with the sgp4 library. The Kozai mean motion is converted
to an orbital period, and the semi-major axis follows from Kepler's third law
using the same Earth constants as the decay simulator, so the simulated orbit
starts with exactly the TLE's period.

Mass, area and the space-weather indices are not part of a TLE and must be
supplied by the caller.
"""

import logging
import math
from typing import Any, Dict, Optional, Tuple

from sgp4.api import Satrec

import config
from decay_service.decay_simulator import SimulationParameters, radius_from_period
from decay_service.errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Above this the circular-orbit assumption no longer holds well
MAX_CIRCULAR_ECCENTRICITY = 0.01

TLE_LINE_LENGTH = 69


def _load_satrec(line1: str, line2: str) -> Satrec:
    line1 = line1.rstrip()
    line2 = line2.rstrip()
    if len(line1) < TLE_LINE_LENGTH or not line1.startswith("1 "):
        raise InvalidParameterError("tle_line1", line1, "not a TLE line 1")
    if len(line2) < TLE_LINE_LENGTH or not line2.startswith("2 "):
        raise InvalidParameterError("tle_line2", line2, "not a TLE line 2")

    try:
        satellite = Satrec.twoline2rv(line1, line2)
    except ValueError as e:
        raise InvalidParameterError("tle", (line1, line2), f"sgp4 rejected TLE: {e}") from e

    if satellite.error != 0 or not satellite.no_kozai > 0:
        raise InvalidParameterError(
            "tle", (line1, line2), f"sgp4 initialisation error {satellite.error}"
        )
    return satellite


def describe_tle(line1: str, line2: str) -> Dict[str, Any]:
    """
    Summarise the orbit described by a TLE.

    Args:
        line1: First line of TLE
        line2: Second line of TLE

    Returns:
        Dictionary with norad_id, eccentricity, mean_motion_rev_per_day,
        period_minutes, semi_major_axis_km and altitude_km

    Raises:
        InvalidParameterError: If the TLE cannot be parsed.
    """
    satellite = _load_satrec(line1, line2)

    # Convert mean motion from rad/min to rev/day
    mean_motion_rev_day = satellite.no_kozai * config.MINUTES_PER_DAY / (2.0 * math.pi)
    period_s = config.SECONDS_PER_DAY / mean_motion_rev_day
    semi_major_axis_m = radius_from_period(period_s)

    return {
        "norad_id": satellite.satnum,
        "eccentricity": satellite.ecco,
        "mean_motion_rev_per_day": mean_motion_rev_day,
        "period_minutes": period_s / 60.0,
        "semi_major_axis_km": semi_major_axis_m / 1000.0,
        "altitude_km": (semi_major_axis_m - config.EARTH_RADIUS) / 1000.0,
    }


def parameters_from_tle(line1: str, line2: str, mass: float, area: float,
                        solar_flux: float, ap_index: float,
                        name: Optional[str] = None) -> Tuple[str, SimulationParameters]:
    """
    Build simulation parameters for a tracked satellite.

    Args:
        line1: First line of TLE
        line2: Second line of TLE
        mass: Satellite mass (kg)
        area: Cross-sectional area (m^2)
        solar_flux: F10.7 solar radio flux (SFU)
        ap_index: Geomagnetic Ap index
        name: Satellite name (default: "SAT_<norad id>")

    Returns:
        Tuple of (name, SimulationParameters)

    Raises:
        InvalidParameterError: If the TLE cannot be parsed, its orbit is
            already below the re-entry floor, or any other parameter is
            non-physical.
    """
    elements = describe_tle(line1, line2)

    if elements["eccentricity"] > MAX_CIRCULAR_ECCENTRICITY:
        logger.warning(
            f"TLE {elements['norad_id']} has eccentricity {elements['eccentricity']:.4f}; "
            f"decay model assumes a circular orbit"
        )

    altitude_km = elements["altitude_km"]
    if altitude_km > config.MODEL_CEILING_KM:
        logger.warning(
            f"TLE {elements['norad_id']} altitude {altitude_km:.1f} km is above the "
            f"{config.MODEL_CEILING_KM:g} km model ceiling"
        )

    parameters = SimulationParameters(
        mass=mass,
        area=area,
        initial_altitude_km=altitude_km,
        solar_flux=solar_flux,
        ap_index=ap_index,
    )
    parameters.validate()

    name = name or f"SAT_{elements['norad_id']}"
    logger.info(
        f"{name}: mean motion {elements['mean_motion_rev_per_day']:.8f} rev/day, "
        f"altitude {altitude_km:.1f} km"
    )

    return name, parameters
