"""
Orbital Decay Configuration and Constants

This module contains the physical constants, empirical model coefficients and
run defaults used throughout the project.

Constants:
    Earth mass, radius and the gravitational constant are the rounded values
    used by the IPS Radio and Space Services decay model. They are kept as-is so
    results stay comparable with published worked examples.

Atmosphere Model:
    Density is anchored at 175 km and falls off with an empirical scale height
    driven by solar flux (F10.7) and geomagnetic activity (Ap). The model is
    only meaningful for near-circular orbits below ~500 km.

    Current values for the space-weather indices:
    - F10.7: spaceweather.gc.ca (daily solar flux report)
    - Ap: spaceweatherlive.com or NOAA SWPC

References:
    IPS Radio and Space Services (1999). Satellite Orbital Decay Calculations.
    Australian Bureau of Meteorology, Space Weather Services.
"""

from typing import Dict, Any, Optional

# Physical constants
EARTH_MASS: float = 5.98e24  # kg
EARTH_RADIUS: float = 6378000.0  # m
GRAVITATIONAL_CONSTANT: float = 6.67e-11  # m^3 / (kg s^2)

SECONDS_PER_DAY: float = 86400.0
MINUTES_PER_DAY: float = 1440.0

# Atmosphere model coefficients
DENSITY_REFERENCE: float = 6.0e-10  # kg/m^3 at the reference altitude
DENSITY_REFERENCE_ALTITUDE_KM: float = 175.0
SCALE_HEIGHT_BASE: float = 900.0
SCALE_HEIGHT_FLUX_COEFF: float = 2.5
SCALE_HEIGHT_FLUX_REF: float = 70.0
SCALE_HEIGHT_AP_COEFF: float = 1.5
SCALE_HEIGHT_DIVISOR: float = 27.0
SCALE_HEIGHT_ALTITUDE_COEFF: float = 0.012
SCALE_HEIGHT_ALTITUDE_REF_KM: float = 200.0

# Simulation
TIME_STEP_DAYS: float = 0.1
DEFAULT_SAMPLE_INTERVAL_KM: float = 10.0
REENTRY_ALTITUDE_KM: float = 180.0  # model floor, re-entry considered imminent
MODEL_CEILING_KM: float = 500.0  # upper validity limit, advisory only

# Upper bound on simulated time for negligible-drag inputs (100 years)
MAX_ELAPSED_DAYS: Optional[float] = 36525.0

# Output
LOG_FILE_SUFFIX: str = "_OrbitalDecay.csv"

# Example satellite for demonstrations and testing
EXAMPLE_SATELLITE: Dict[str, Any] = {
    'name': 'CUBESAT-3U',
    'mass': 4.0,
    'area': 0.03,
    'initial_altitude_km': 300.0,
    'solar_flux': 150.0,
    'ap_index': 10.0,
}
