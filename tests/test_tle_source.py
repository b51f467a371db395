"""
Tests for TLE-Derived Simulation Parameters

Run with:
    python -m pytest tests/test_tle_source.py -v
"""

import unittest

from decay_service.decay_simulator import SimulationParameters, initial_state
from decay_service.errors import InvalidParameterError
from decay_service.tle_source import describe_tle, parameters_from_tle


# ISS TLE data (as of September 2023)
ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"

# High-drag satellite already below the model floor
DECAY_LINE1 = "1 44444U 19999A   23259.50000000  .10000000  00000-0  50000-2 0  9999"
DECAY_LINE2 = "2 44444  51.6400 100.0000 0005000  90.0000 270.0000 16.50000000 99999"

# Vanguard 2 - eccentric orbit
VANGUARD_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VANGUARD_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"


class TestDescribeTle(unittest.TestCase):
    """Test orbit summary from TLE."""

    def test_iss_elements(self):
        elements = describe_tle(ISS_LINE1, ISS_LINE2)
        self.assertEqual(elements["norad_id"], 25544)
        self.assertAlmostEqual(elements["mean_motion_rev_per_day"], 15.49541986, places=6)
        self.assertAlmostEqual(elements["eccentricity"], 0.0004263, places=7)
        self.assertAlmostEqual(elements["period_minutes"], 1440.0 / 15.49541986, places=4)
        self.assertGreater(elements["altitude_km"], 380.0)
        self.assertLess(elements["altitude_km"], 460.0)
        self.assertAlmostEqual(
            elements["semi_major_axis_km"] - elements["altitude_km"], 6378.0, places=6
        )

    def test_malformed_lines(self):
        with self.assertRaises(InvalidParameterError) as ctx:
            describe_tle("garbage", ISS_LINE2)
        self.assertEqual(ctx.exception.field, "tle_line1")

        with self.assertRaises(InvalidParameterError) as ctx:
            describe_tle(ISS_LINE1, ISS_LINE1)
        self.assertEqual(ctx.exception.field, "tle_line2")


class TestParametersFromTle(unittest.TestCase):
    """Test simulation parameters built from a TLE."""

    def test_iss_parameters(self):
        name, parameters = parameters_from_tle(
            ISS_LINE1, ISS_LINE2, mass=420000.0, area=1600.0, solar_flux=150.0, ap_index=10.0
        )
        self.assertEqual(name, "SAT_25544")
        self.assertIsInstance(parameters, SimulationParameters)
        self.assertEqual(parameters.mass, 420000.0)
        self.assertEqual(parameters.area, 1600.0)
        self.assertAlmostEqual(
            parameters.initial_altitude_km, describe_tle(ISS_LINE1, ISS_LINE2)["altitude_km"]
        )

    def test_initial_period_matches_tle(self):
        """The simulated orbit starts with the TLE's period."""
        _, parameters = parameters_from_tle(
            ISS_LINE1, ISS_LINE2, mass=420000.0, area=1600.0, solar_flux=150.0, ap_index=10.0
        )
        state = initial_state(parameters.initial_altitude_km)
        self.assertAlmostEqual(state.orbital_period_s / 60.0, 1440.0 / 15.49541986, places=4)

    def test_custom_name(self):
        name, _ = parameters_from_tle(
            ISS_LINE1, ISS_LINE2, mass=1.0, area=0.01, solar_flux=150.0, ap_index=10.0,
            name="ISS (ZARYA)",
        )
        self.assertEqual(name, "ISS (ZARYA)")

    def test_orbit_below_floor(self):
        with self.assertRaises(InvalidParameterError):
            parameters_from_tle(
                DECAY_LINE1, DECAY_LINE2, mass=100.0, area=1.0, solar_flux=150.0, ap_index=10.0
            )

    def test_invalid_physical_parameters(self):
        with self.assertRaises(InvalidParameterError) as ctx:
            parameters_from_tle(
                ISS_LINE1, ISS_LINE2, mass=-1.0, area=1.0, solar_flux=150.0, ap_index=10.0
            )
        self.assertEqual(ctx.exception.field, "mass")

    def test_eccentric_orbit_warning(self):
        with self.assertLogs("decay_service.tle_source", level="WARNING") as logs:
            parameters_from_tle(
                VANGUARD_LINE1, VANGUARD_LINE2, mass=1.5, area=0.2,
                solar_flux=150.0, ap_index=10.0,
            )
        self.assertTrue(any("eccentricity" in message for message in logs.output))


if __name__ == "__main__":
    unittest.main()
