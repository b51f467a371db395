"""
Orbital Decay Package

This package estimates the orbital decay and re-entry time of a low-Earth-orbit
satellite in an essentially circular orbit, using an empirical atmospheric
density model driven by solar flux (F10.7) and geomagnetic activity (Ap).

Modules:
    atmosphere: Empirical scale height and density model
    decay_simulator: Step-by-step decay simulation and sample generation
    decay_report: Console and CSV reporting of decay trajectories
    tle_source: Simulation parameters derived from Two-Line Element sets
    sensitivity: Re-entry sensitivity to parameter variations
    errors: Error types raised by the simulation

References:
    IPS Radio and Space Services (1999). Satellite Orbital Decay Calculations.
"""

__version__ = "1.0.0"
