"""
Atmosphere Model

Empirical atmospheric density for orbital decay estimates below ~500 km.

Density follows an exponential profile anchored at 175 km:

    rho(h) = 6.0e-10 * exp(-(h - 175) / H)

where the scale height H (km) is an empirical fit to solar and geomagnetic
activity and altitude:

    H = (900 + 2.5 (F10.7 - 70) + 1.5 Ap) / (27 - 0.012 (h - 200))

Higher F10.7 or Ap heats the thermosphere, raising the scale height and hence
the density at orbital altitudes.

References:
    IPS Radio and Space Services (1999). Satellite Orbital Decay Calculations.
"""

import math

import config
from decay_service.errors import ModelDivergenceError


def scale_height(altitude_km: float, solar_flux: float, ap_index: float) -> float:
    """
    Empirical atmospheric scale height.

    Args:
        altitude_km: Altitude above mean Earth radius (km)
        solar_flux: F10.7 solar radio flux (SFU)
        ap_index: Geomagnetic Ap index

    Returns:
        Scale height (km)

    Raises:
        ModelDivergenceError: If the fit's denominator is non-positive or the
            result is not a positive finite number.
    """
    numerator = (
        config.SCALE_HEIGHT_BASE
        + config.SCALE_HEIGHT_FLUX_COEFF * (solar_flux - config.SCALE_HEIGHT_FLUX_REF)
        + config.SCALE_HEIGHT_AP_COEFF * ap_index
    )
    denominator = config.SCALE_HEIGHT_DIVISOR - config.SCALE_HEIGHT_ALTITUDE_COEFF * (
        altitude_km - config.SCALE_HEIGHT_ALTITUDE_REF_KM
    )

    if denominator <= 0:
        raise ModelDivergenceError(altitude_km, denominator)

    height = numerator / denominator
    if not math.isfinite(height) or height <= 0:
        raise ModelDivergenceError(
            altitude_km,
            denominator,
            f"Scale height {height!r} km is not positive at {altitude_km:.3f} km",
        )

    return height


def divergence_altitude_km() -> float:
    """Altitude (km) at which the scale-height denominator reaches zero."""
    return config.SCALE_HEIGHT_ALTITUDE_REF_KM + (
        config.SCALE_HEIGHT_DIVISOR / config.SCALE_HEIGHT_ALTITUDE_COEFF
    )


def atmospheric_density(altitude_km: float, solar_flux: float, ap_index: float) -> float:
    """
    Atmospheric density at the given altitude.

    Args:
        altitude_km: Altitude above mean Earth radius (km)
        solar_flux: F10.7 solar radio flux (SFU)
        ap_index: Geomagnetic Ap index

    Returns:
        Density (kg/m^3). May underflow to 0.0 for very high altitudes, and is
        inf when the exponential overflows, which only happens thousands of
        km below the re-entry floor.
    """
    height = scale_height(altitude_km, solar_flux, ap_index)
    try:
        return config.DENSITY_REFERENCE * math.exp(
            -(altitude_km - config.DENSITY_REFERENCE_ALTITUDE_KM) / height
        )
    except OverflowError:
        return math.inf
