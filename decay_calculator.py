"""
Satellite Orbital Decay Calculator

Estimates the re-entry time of a low-Earth-orbit satellite in an essentially
circular orbit below ~500 km, using a simple atmospheric density model driven
by solar flux (F10.7) and geomagnetic activity (Ap).

Parameters not given on the command line are prompted for interactively.
The trajectory is printed as a table and written to "<name>_OrbitalDecay.csv".

Usage:
    python decay_calculator.py [--name NAME] [--mass KG] [--area M2]
                               [--altitude KM | --tle LINE1 LINE2]
                               [--f107 SFU] [--ap AP]
                               [--output-dir DIR | --no-log] [--sample-interval KM]
                               [--max-days DAYS|none] [--sensitivity FIELD]
                               [--plot FILE] [--example] [--log-file FILE] [--verbose]

Exit status:
    0 on success, 1 if the simulation halted, 2 for invalid input.

Current space-weather indices:
    F10.7: https://spaceweather.gc.ca/forecast-prevision/solar-solaire/solarflux/sx-5-flux-en.php
    Ap: https://www.spaceweatherlive.com/en/help/the-ap-index.html

References:
    IPS Radio and Space Services (1999). Satellite Orbital Decay Calculations.
"""

import argparse
import logging
import math
import sys
from typing import Callable, Optional

import config
from decay_service.decay_report import plot_decay_curve, run_report
from decay_service.decay_simulator import SimulationParameters
from decay_service.errors import (
    InvalidParameterError,
    ModelDivergenceError,
    NonConvergenceError,
)
from decay_service.sensitivity import (
    SWEEP_FIELDS,
    analyze_sensitivity,
    plot_sensitivity,
    reentry_spread,
)
from decay_service.tle_source import parameters_from_tle
from logging_config import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_SIMULATION_ERROR = 1
EXIT_INVALID_INPUT = 2


class InputAborted(Exception):
    """Interactive input ended before all parameters were supplied."""


def prompt_text(prompt: str, input_fn: Callable[[str], str] = input) -> str:
    """Prompt for a non-empty string."""
    while True:
        try:
            value = input_fn(prompt).strip()
        except EOFError:
            raise InputAborted(prompt.strip())
        if value:
            return value
        print("Please enter a value.")


def prompt_float(prompt: str, minimum: float = 0.0, allow_equal: bool = False,
                 input_fn: Callable[[str], str] = input) -> float:
    """
    Prompt until a number above the minimum is entered.

    Args:
        prompt: Text shown to the user
        minimum: Lower bound
        allow_equal: Accept values equal to the minimum
        input_fn: Input function (for testing)

    Raises:
        InputAborted: On end of input.
    """
    while True:
        try:
            user = input_fn(prompt)
        except EOFError:
            raise InputAborted(prompt.strip())
        try:
            value = float(user)
        except (ValueError, TypeError):
            print("Please enter a valid number.")
            continue
        if not math.isfinite(value):
            print("Please enter a finite number.")
            continue
        if value > minimum or (allow_equal and value == minimum):
            return value
        bound = ">=" if allow_equal else ">"
        print(f"Value must be {bound} {minimum:g}.")


# Argument name for each field of config.EXAMPLE_SATELLITE
EXAMPLE_ARGUMENTS = {
    'name': 'name',
    'mass': 'mass',
    'area': 'area',
    'initial_altitude_km': 'altitude',
    'solar_flux': 'f107',
    'ap_index': 'ap',
}


def apply_example(args: argparse.Namespace) -> argparse.Namespace:
    """Fill arguments not given on the command line from the example satellite."""
    values = vars(args).copy()
    for field, argument in EXAMPLE_ARGUMENTS.items():
        # A TLE names the satellite and sets its altitude
        if args.tle and field in ("name", "initial_altitude_km"):
            continue
        if values.get(argument) is None:
            values[argument] = config.EXAMPLE_SATELLITE[field]
    return argparse.Namespace(**values)


def max_days(value: str) -> Optional[float]:
    """Parse --max-days; "none" or 0 disables the cap."""
    if value.strip().lower() == "none":
        return None
    try:
        days = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid day count: {value!r}")
    if days == 0:
        return None
    if not days > 0 or not math.isfinite(days):
        raise argparse.ArgumentTypeError(f"must be a positive number, 0 or none: {value!r}")
    return days


def collect_parameters(args: argparse.Namespace,
                       input_fn: Callable[[str], str] = input):
    """
    Gather the satellite name and simulation parameters.

    Values given on the command line are used as-is. With --example, missing
    values come from config.EXAMPLE_SATELLITE; otherwise they are prompted for.

    Returns:
        Tuple of (name, SimulationParameters)
    """
    if args.example:
        args = apply_example(args)

    name = args.name if args.name else None
    if name is None and not args.tle:
        name = prompt_text("Satellite name: ", input_fn)

    mass = args.mass if args.mass is not None else prompt_float(
        "Satellite mass [kg]: ", input_fn=input_fn)
    area = args.area if args.area is not None else prompt_float(
        "Satellite area [m^2]: ", input_fn=input_fn)

    altitude = None
    if not args.tle:
        altitude = args.altitude if args.altitude is not None else prompt_float(
            "Satellite Starting height/Altitude [km]: ",
            minimum=config.REENTRY_ALTITUDE_KM,
            input_fn=input_fn,
        )

    f107 = args.f107 if args.f107 is not None else prompt_float(
        "Solar Radio Flux (F10.7) in SFU: ", input_fn=input_fn)
    ap = args.ap if args.ap is not None else prompt_float(
        "Geomagnetic A index: ", allow_equal=True, input_fn=input_fn)

    if args.tle:
        return parameters_from_tle(args.tle[0], args.tle[1], mass, area, f107, ap, name=name)

    parameters = SimulationParameters(
        mass=mass,
        area=area,
        initial_altitude_km=altitude,
        solar_flux=f107,
        ap_index=ap,
    )
    parameters.validate()
    return name, parameters


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Satellite orbital decay and re-entry estimate"
    )
    parser.add_argument("--name", help="Satellite name (also names the CSV log)")
    parser.add_argument("--mass", type=float, help="Satellite mass [kg]")
    parser.add_argument("--area", type=float, help="Satellite cross-sectional area [m^2]")
    parser.add_argument("--altitude", type=float, help="Starting altitude [km]")
    parser.add_argument(
        "--tle", nargs=2, metavar=("LINE1", "LINE2"),
        help="Take the starting altitude from a Two-Line Element set",
    )
    parser.add_argument("--f107", type=float, help="Solar radio flux F10.7 [SFU]")
    parser.add_argument("--ap", type=float, help="Geomagnetic Ap index")
    parser.add_argument(
        "--output-dir", default=".", help="Directory for the CSV log (default: current)"
    )
    parser.add_argument(
        "--no-log", action="store_true", help="Do not write the CSV log file"
    )
    parser.add_argument(
        "--sample-interval", type=float, default=config.DEFAULT_SAMPLE_INTERVAL_KM,
        help="Altitude loss between printed samples [km] (default: %(default)s)",
    )
    parser.add_argument(
        "--max-days", type=max_days, default=config.MAX_ELAPSED_DAYS,
        help="Give up after this many simulated days; 0 or none for no limit "
             "(default: %(default)s)",
    )
    parser.add_argument(
        "--example", action="store_true",
        help="Use the example satellite for any value not given",
    )
    parser.add_argument(
        "--sensitivity", choices=SWEEP_FIELDS,
        help="Also run a sensitivity analysis on this parameter",
    )
    parser.add_argument("--plot", metavar="FILE", help="Save a plot of the results")
    parser.add_argument("--log-file", metavar="FILE", help="Also write log records to FILE")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(args: argparse.Namespace, input_fn: Callable[[str], str] = input,
        stream=None) -> int:
    """
    Execute one calculator session.

    Returns:
        Process exit status
    """
    try:
        name, parameters = collect_parameters(args, input_fn)
    except InputAborted as e:
        logger.error(f"Input ended before all parameters were given ({e})")
        return EXIT_INVALID_INPUT
    except InvalidParameterError as e:
        logger.error(str(e))
        return EXIT_INVALID_INPUT

    options = {
        "sample_interval_km": args.sample_interval,
        "max_elapsed_days": args.max_days,
    }
    output_dir: Optional[str] = None if args.no_log else args.output_dir

    try:
        result = run_report(name, parameters, output_dir=output_dir, stream=stream, **options)

        if args.sensitivity:
            runs = analyze_sensitivity(parameters, args.sensitivity, **options)
            for variation, delta in reentry_spread(runs):
                logger.info(f"{args.sensitivity} {variation:+g}%: {delta:+.1f} days vs nominal")
            if args.plot:
                plot_sensitivity(runs, args.sensitivity, args.plot, title=name)
        elif args.plot:
            plot_decay_curve(result.samples, name, args.plot)
    except InvalidParameterError as e:
        logger.error(str(e))
        return EXIT_INVALID_INPUT
    except (ModelDivergenceError, NonConvergenceError) as e:
        logger.error(f"Simulation halted: {e}")
        return EXIT_SIMULATION_ERROR

    return EXIT_OK


def main(argv=None) -> int:
    """Calculator entry point."""
    args = build_arg_parser().parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
