"""
Decay Report Output

Renders a decay trajectory to two sinks at once:
- a human-readable, tab-separated table on a text stream (stdout by default)
- a comma-separated log file named "<satellite>_OrbitalDecay.csv"

Both sinks get the same header block (satellite name, mass, area, initial
height, F10.7 and Ap), one row per sample and a trailing
"Re-entry after N days" line. Rows are written as they are produced, so a run
that halts part-way still leaves its partial trajectory on disk.

Numbers are written with six significant digits.
"""

import logging
import os
import re
import sys
from typing import Optional, TextIO

import config
from decay_service.decay_simulator import (
    DecaySimulator,
    SampleRecord,
    SimulationParameters,
    SimulationResult,
)
from decay_service.errors import DecayError, InvalidParameterError

logger = logging.getLogger(__name__)

COLUMN_TITLES = ("Time", "Height", "Period", "Mean motion", "Decay")
COLUMN_UNITS = ("(days)", "(km)", "(mins)", "(rev/day)", "(rev/day^2)")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def log_file_name(name: str) -> str:
    """
    Log file name for a satellite.

    Characters that are unsafe in file names are replaced by underscores.
    """
    safe = _UNSAFE_CHARS.sub("_", name.strip()) or "satellite"
    return safe + config.LOG_FILE_SUFFIX


def _fmt(value: float) -> str:
    return f"{value:g}"


class DecayReport:
    """
    Console and CSV report of one decay run.

    Use as a context manager; the log file is opened on entry and closed on
    every exit path.

    Example:
        with DecayReport("SAT-1", parameters, log_path="SAT-1_OrbitalDecay.csv") as report:
            report.write_header()
            for record in simulator.samples():
                report.write_sample(record)
            report.write_footer(simulator.days_to_reentry)
    """

    def __init__(self, name: str, parameters: SimulationParameters,
                 stream: Optional[TextIO] = None, log_path: Optional[str] = None):
        """
        Initialize the report.

        Args:
            name: Satellite identifier
            parameters: Parameters of the run being reported
            stream: Console stream (default: sys.stdout). Pass None to use stdout.
            log_path: CSV log path. If None, only the console is written.
        """
        self.name = name
        self.parameters = parameters
        self.stream = stream if stream is not None else sys.stdout
        self.log_path = log_path
        self._log: Optional[TextIO] = None
        self.rows_written = 0

    def __enter__(self) -> "DecayReport":
        if self.log_path is not None:
            self._log = open(self.log_path, "w", encoding="utf-8", newline="")
            logger.debug(f"Opened decay log {self.log_path}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Flush and close the log file if open."""
        if self._log is not None:
            self._log.close()
            self._log = None
            logger.debug(f"Closed decay log {self.log_path} ({self.rows_written} rows)")

    def _console(self, line: str = "") -> None:
        print(line, file=self.stream)

    def _logline(self, line: str = "") -> None:
        if self._log is not None:
            self._log.write(line + "\n")

    def write_header(self) -> None:
        """Write the parameter block and column titles."""
        p = self.parameters
        label = os.path.basename(self.log_path) if self.log_path else self.name
        lines = [
            f"File - {label}",
            f"\t Mass = {_fmt(p.mass)} Kg",
            f"\t Area = {_fmt(p.area)} m^2",
            f"\t Initial height = {_fmt(p.initial_altitude_km)}Km",
            f"\t F10.7 = {_fmt(p.solar_flux)} , Ap = {_fmt(p.ap_index)}",
        ]

        self._console()
        for line in lines:
            self._console(line)
            self._logline(line)

        self._console()
        self._console("\t\t".join(COLUMN_TITLES))
        self._console("\t\t".join(COLUMN_UNITS))

        self._logline()
        self._logline(",".join(COLUMN_TITLES))
        self._logline(",".join(COLUMN_UNITS))

    def write_sample(self, record: SampleRecord) -> None:
        """Write one trajectory row."""
        values = [_fmt(v) for v in record.as_row()]
        self._console("\t\t".join(values))
        self._logline(",".join(values))
        self.rows_written += 1

    def write_footer(self, days_to_reentry: float) -> None:
        """Write the re-entry summary line."""
        line = f"Re-entry after {_fmt(days_to_reentry)} days"
        self._console(line)
        self._logline(line)

    def write_halt(self, error: Exception) -> None:
        """Write a summary line for a run that stopped before re-entry."""
        line = f"Simulation halted: {error}"
        self._console(line)
        self._logline(line)


def run_report(name: str, parameters: SimulationParameters, output_dir: Optional[str] = ".",
               stream: Optional[TextIO] = None, **simulator_options) -> SimulationResult:
    """
    Simulate a decay run and report it to the console and a CSV log.

    Args:
        name: Satellite identifier, also used to name the log file
        parameters: Satellite and space-weather parameters
        output_dir: Directory for the CSV log, or None to skip the log file
        stream: Console stream (default: sys.stdout)
        **simulator_options: Passed through to DecaySimulator

    Returns:
        SimulationResult with all samples and the days to re-entry

    Raises:
        InvalidParameterError: If any parameter is non-physical.
        ModelDivergenceError: If the atmosphere model diverges. Rows produced
            before the failure remain in the log.
        NonConvergenceError: If the elapsed-time cap is reached.
    """
    if not isinstance(name, str):
        raise InvalidParameterError("name", name, "must be a string")

    simulator = DecaySimulator(parameters, **simulator_options)

    log_path = None
    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
        log_path = os.path.join(output_dir, log_file_name(name))

    samples = []
    with DecayReport(name, parameters, stream=stream, log_path=log_path) as report:
        report.write_header()
        try:
            for record in simulator.samples():
                report.write_sample(record)
                samples.append(record)
        except DecayError as e:
            report.write_halt(e)
            logger.error(f"Decay run for {name} halted after {len(samples)} samples: {e}")
            raise
        report.write_footer(simulator.days_to_reentry)

    logger.info(f"{name}: re-entry after {simulator.days_to_reentry:.1f} days")
    if log_path is not None:
        logger.info(f"Saved decay log to {log_path}")

    return SimulationResult(samples, simulator.days_to_reentry)


def plot_decay_curve(samples, name: str, output_file: str) -> str:
    """
    Plot altitude and mean motion against time for a sampled trajectory.

    Parameters
    ----------
    samples : sequence of SampleRecord
        Trajectory to plot
    name : str
        Satellite identifier used in the title
    output_file : str
        Path of the image to write

    Returns
    -------
    str
        Path of the saved figure
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    days = [s.elapsed_days for s in samples]
    altitudes = [s.altitude_km for s in samples]
    mean_motion = [s.mean_motion_rev_per_day for s in samples]

    fig, ax1 = plt.subplots(figsize=(10, 6))
    ax1.plot(days, altitudes, color="navy", marker="o", markersize=3, label="Altitude")
    ax1.set_xlabel("Time (days)")
    ax1.set_ylabel("Altitude (km)")
    ax1.grid(True, alpha=0.3)

    ax2 = ax1.twinx()
    ax2.plot(days, mean_motion, color="darkorange", linestyle="--", label="Mean motion")
    ax2.set_ylabel("Mean motion (rev/day)")

    ax1.set_title(f"Orbital Decay of {name}")
    fig.legend(loc="upper right")

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    logger.info(f"Saved decay plot to {output_file}")
    plt.close(fig)

    return output_file
