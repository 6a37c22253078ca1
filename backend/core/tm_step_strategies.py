"""
Step strategies for automatic Training-Max increases.

A strategy receives the current TM, the AMRAP reps performed, the week's
AMRAP target and the exercise rounding increment, and returns the TM
delta in kg. Strategies are only consulted once reps >= target on a
non-deload week; the ledger clamps the result to the configured maximum
delta and skips zero steps.

Select a strategy by name with TM_AUTO_ADJUST_STRATEGY.
"""

from typing import Callable, Dict, Tuple

TmStepStrategy = Callable[[float, int, int, float], float]


def rounding_increment_step(tm_kg: float, reps: int, amrap_target: int, rounding_kg: float) -> float:
    """One rounding unit per qualifying week."""
    return rounding_kg


# (reps over target, fraction of TM), checked top-down
PERCENT_STEPS: Tuple[Tuple[int, float], ...] = (
    (5, 0.03),
    (4, 0.02),
    (3, 0.015),
    (2, 0.01),
    (1, 0.005),
)


def percent_table_step(tm_kg: float, reps: int, amrap_target: int, rounding_kg: float) -> float:
    """Percentage of TM scaled by how far the AMRAP set beat its target."""
    over = reps - amrap_target
    for threshold, fraction in PERCENT_STEPS:
        if over >= threshold:
            return tm_kg * fraction
    return 0.0


STEP_STRATEGIES: Dict[str, TmStepStrategy] = {
    "rounding_increment": rounding_increment_step,
    "percent_table": percent_table_step,
}


def get_step_strategy(name: str) -> TmStepStrategy:
    try:
        return STEP_STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown TM step strategy '{name}'. Must be one of: {sorted(STEP_STRATEGIES)}"
        )
