"""
Re-entry Sensitivity Analysis

Re-runs the decay simulation with one input varied by a set of percentages
and compares the resulting re-entry times.

The inputs are uncertain in practice:
- Area and mass set the ballistic coefficient, which depends on attitude.
- F10.7 and Ap are forecasts, and they drive the atmospheric density.

A sweep shows how strongly the predicted re-entry date depends on each of them.
"""

import dataclasses
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from decay_service.decay_simulator import DecaySimulator, SimulationParameters
from decay_service.errors import InvalidParameterError

logger = logging.getLogger(__name__)

SWEEP_FIELDS = ("mass", "area", "solar_flux", "ap_index")
DEFAULT_VARIATIONS = (-50, -25, -10, 0, 10, 25, 50)

FIELD_LABELS = {
    "mass": "Mass",
    "area": "Area",
    "solar_flux": "F10.7",
    "ap_index": "Ap",
}


class SensitivityRun(NamedTuple):
    """Outcome of one varied simulation."""

    parameters: SimulationParameters
    days_to_reentry: float
    elapsed_days: np.ndarray
    altitude_km: np.ndarray


def vary_parameter(parameters: SimulationParameters, field: str,
                   variation: float) -> SimulationParameters:
    """
    Copy of parameters with one field scaled by a percentage.

    Raises:
        InvalidParameterError: If the field cannot be swept or the varied
            value is non-physical.
    """
    if field not in SWEEP_FIELDS:
        raise InvalidParameterError("field", field, f"must be one of {', '.join(SWEEP_FIELDS)}")

    value = getattr(parameters, field) * (1 + variation / 100.0)
    varied = dataclasses.replace(parameters, **{field: value})
    varied.validate()
    return varied


def analyze_sensitivity(
    parameters: SimulationParameters,
    field: str,
    variations: Sequence[float] = DEFAULT_VARIATIONS,
    **simulator_options,
) -> Dict[float, SensitivityRun]:
    """
    Simulate the decay once per percentage variation of one parameter.

    Parameters
    ----------
    parameters : SimulationParameters
        Nominal parameters
    field : str
        Parameter to vary, one of SWEEP_FIELDS
    variations : sequence of float
        Percentage variations to test
    **simulator_options
        Passed through to DecaySimulator

    Returns
    -------
    dict
        Mapping from variation percentage to SensitivityRun
    """
    logger.info(f"Starting {FIELD_LABELS.get(field, field)} sensitivity analysis")
    logger.info(f"Variations: {list(variations)}%")

    runs = {}
    for variation in variations:
        varied = vary_parameter(parameters, field, variation)
        simulator = DecaySimulator(varied, **simulator_options)

        times = []
        altitudes = []
        for state, _ in simulator.steps():
            times.append(state.elapsed_days)
            altitudes.append(state.altitude_km)

        runs[variation] = SensitivityRun(
            parameters=varied,
            days_to_reentry=simulator.days_to_reentry,
            elapsed_days=np.array(times),
            altitude_km=np.array(altitudes),
        )
        logger.info(
            f"{FIELD_LABELS.get(field, field)} {variation:+g}%: "
            f"re-entry after {simulator.days_to_reentry:.1f} days"
        )

    return runs


def reentry_spread(runs: Dict[float, SensitivityRun]) -> List[Tuple[float, float]]:
    """
    Re-entry time of each variation relative to the nominal run.

    Returns:
        List of (variation, days - nominal days), sorted by variation.
        Empty if the runs contain no 0% variation.
    """
    if 0 not in runs:
        return []

    nominal = runs[0].days_to_reentry
    return [
        (variation, runs[variation].days_to_reentry - nominal)
        for variation in sorted(runs)
    ]


def plot_sensitivity(runs: Dict[float, SensitivityRun], field: str,
                     output_file: str = "reentry_sensitivity.png",
                     title: Optional[str] = None) -> str:
    """
    Plot altitude decay curves and re-entry times for a sensitivity sweep.

    Parameters
    ----------
    runs : dict
        Result of analyze_sensitivity
    field : str
        Parameter that was varied
    output_file : str
        Path of the image to write
    title : str, optional
        Figure title

    Returns
    -------
    str
        Path of the saved figure
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    label_name = FIELD_LABELS.get(field, field)
    variations = sorted(runs)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 6))
    colors = plt.cm.RdYlBu(np.linspace(0, 1, len(variations)))

    # Altitude evolution
    for i, variation in enumerate(variations):
        run = runs[variation]
        label = f"{label_name} {variation:+g}%" if variation != 0 else f"Nominal {label_name}"
        linewidth = 3 if variation == 0 else 1.5
        alpha = 1.0 if variation == 0 else 0.8
        ax1.plot(
            run.elapsed_days,
            run.altitude_km,
            color=colors[i],
            label=label,
            linewidth=linewidth,
            alpha=alpha,
        )

    ax1.set_xlabel("Time (days)")
    ax1.set_ylabel("Altitude (km)")
    ax1.set_title("Altitude Decay")
    ax1.legend(loc="upper right")
    ax1.grid(True, alpha=0.3)

    # Re-entry time per variation
    days = [runs[v].days_to_reentry for v in variations]
    positions = np.arange(len(variations))
    bars = ax2.bar(positions, days, color="skyblue", alpha=0.7, edgecolor="navy")
    ax2.set_xticks(positions)
    ax2.set_xticklabels([f"{v:+g}" for v in variations])
    ax2.set_xlabel(f"{label_name} Variation (%)")
    ax2.set_ylabel("Days to Re-entry")
    ax2.set_title(f"Re-entry Time vs {label_name} Variation")
    ax2.grid(True, alpha=0.3)

    for bar, d in zip(bars, days):
        height = bar.get_height()
        ax2.text(
            bar.get_x() + bar.get_width() / 2.0,
            height + height * 0.01,
            f"{d:.1f}",
            ha="center",
            va="bottom",
            fontsize=9,
        )

    if title:
        fig.suptitle(title)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    logger.info(f"Saved sensitivity plot to {output_file}")
    plt.close(fig)

    return output_file
