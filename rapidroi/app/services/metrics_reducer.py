"""
Metrics reducer.

All edits to the calculator inputs go through reduce_metrics(state, action),
a pure function returning a new ROIMetrics. Dependent fields are recomputed
from the DERIVATION_RULES table: a rule list per edited key, applied in order.
Keys without rules only update themselves.
"""

import math
from typing import Callable, Dict, List

from rapidroi.app.models.metrics import MAX_METRIC_VALUE, MetricAction, ROIMetrics


REVENUE_SLIDER_MIN = 5_000_000
REVENUE_SLIDER_MAX = 50_000_000
REVENUE_PER_RVU = 32
WORKING_DAYS_PER_YEAR = 252

# Staffing defaults scale with revenue (headcount per $1M claimed)
BILLERS_PER_MILLION = 0.4
PHYSICIANS_PER_MILLION = 0.6

DerivationRule = Callable[[Dict[str, float], Dict[str, float]], None]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}")
    return int(math.floor(value + 0.5))


def _safe_divisor(value: float) -> float:
    return max(value, 1.0)


def default_headcount(revenue: float, per_million: float) -> int:
    """Headcount implied by the default staffing ratio for a revenue."""
    return round_half_up(revenue / 1_000_000 * per_million)


def _claims_and_charts_from_revenue(previous: Dict[str, float], state: Dict[str, float]) -> None:
    volume = round_half_up(
        state["revenue_claimed"] / _safe_divisor(state["average_cost_per_claim"])
    )
    state["claims_per_annum"] = volume
    state["charts_processed_per_annum"] = volume


def _rvus_from_revenue(previous: Dict[str, float], state: Dict[str, float]) -> None:
    state["rvus_coded_per_annum"] = round_half_up(state["revenue_claimed"] / REVENUE_PER_RVU)


def _rescale_default_staffing(previous: Dict[str, float], state: Dict[str, float]) -> None:
    # Only counts still at the default ratio follow revenue; user-entered ones stay
    old_revenue = previous["revenue_claimed"]
    new_revenue = state["revenue_claimed"]
    for key, ratio in (
        ("number_of_billers", BILLERS_PER_MILLION),
        ("number_of_physicians", PHYSICIANS_PER_MILLION),
    ):
        if previous[key] == default_headcount(old_revenue, ratio):
            state[key] = default_headcount(new_revenue, ratio)


def _charts_per_coder_from_charts(previous: Dict[str, float], state: Dict[str, float]) -> None:
    state["charts_per_coder_per_day"] = (
        state["charts_processed_per_annum"]
        / _safe_divisor(state["number_of_coders"])
        / WORKING_DAYS_PER_YEAR
    )


def _charts_per_coder_from_claims(previous: Dict[str, float], state: Dict[str, float]) -> None:
    state["charts_per_coder_per_day"] = (
        state["claims_per_annum"]
        / _safe_divisor(state["number_of_coders"])
        / WORKING_DAYS_PER_YEAR
    )


def _licenses_follow_coders(previous: Dict[str, float], state: Dict[str, float]) -> None:
    state["number_of_encoder_licenses"] = state["number_of_coders"]


DERIVATION_RULES: Dict[str, List[DerivationRule]] = {
    "revenue_claimed": [
        _claims_and_charts_from_revenue,
        _rvus_from_revenue,
        _rescale_default_staffing,
        _charts_per_coder_from_charts,
    ],
    "average_cost_per_claim": [_claims_and_charts_from_revenue],
    "number_of_coders": [_licenses_follow_coders, _charts_per_coder_from_charts],
    "charts_processed_per_annum": [_charts_per_coder_from_charts],
    "claims_per_annum": [_charts_per_coder_from_claims],
}


def clamp_revenue(value: float) -> float:
    """Clamp revenue to the primary slider range."""
    return min(max(value, REVENUE_SLIDER_MIN), REVENUE_SLIDER_MAX)


def _target_value(state: ROIMetrics, action: MetricAction) -> float:
    current = getattr(state, action.key)
    if action.type == "increment":
        value = current + action.step
    elif action.type == "decrement":
        value = current - action.step
    else:
        value = action.value

    value = min(max(float(value), 0.0), MAX_METRIC_VALUE)
    if action.key == "revenue_claimed" and action.source == "slider":
        value = clamp_revenue(value)
    return value


def update_metric(state: ROIMetrics, key: str, value: float, source: str = "input") -> ROIMetrics:
    """Convenience wrapper: apply a single set action."""
    return reduce_metrics(state, MetricAction(type="set", key=key, value=value, source=source))


def reduce_metrics(state: ROIMetrics, action: MetricAction) -> ROIMetrics:
    """
    Apply one action to the metrics state and return the new state.

    The input state is never mutated.

    Args:
        state: Current metrics
        action: set / increment / decrement / reset

    Returns:
        New ROIMetrics with the edited field and its derived fields updated
    """
    if action.type == "reset":
        return ROIMetrics()

    previous = state.model_dump()
    updated = dict(previous)
    updated[action.key] = _target_value(state, action)

    for rule in DERIVATION_RULES.get(action.key, []):
        rule(previous, updated)

    return ROIMetrics(**updated)
