"""
Lever multiplier table.

Static reference data: (lever, level) -> multiplier. Selecting a level is a
pure UI state change; the evaluator reads the multiplier from here.
"""

from types import MappingProxyType
from typing import Any, Dict, List

from rapidroi.app.models.metrics import Lever, LeverLevel, LeverSelection


LEVER_MULTIPLIERS = MappingProxyType({
    Lever.CODER_PRODUCTIVITY: MappingProxyType(
        {LeverLevel.LOW: 0.4, LeverLevel.MEDIUM: 0.8, LeverLevel.HIGH: 1.0}
    ),
    Lever.BILLING_AUTOMATION: MappingProxyType(
        {LeverLevel.LOW: 0.3, LeverLevel.MEDIUM: 0.5, LeverLevel.HIGH: 0.7}
    ),
    Lever.PHYSICIAN_TIME_SAVED: MappingProxyType(
        {LeverLevel.LOW: 0.1, LeverLevel.MEDIUM: 0.2, LeverLevel.HIGH: 0.3}
    ),
    Lever.TECHNOLOGY_COST_SAVED: MappingProxyType(
        {LeverLevel.LOW: 0.25, LeverLevel.MEDIUM: 0.5, LeverLevel.HIGH: 0.75}
    ),
    Lever.CLAIM_DENIAL_REDUCTION: MappingProxyType(
        {LeverLevel.LOW: 0.2, LeverLevel.MEDIUM: 0.35, LeverLevel.HIGH: 0.5}
    ),
    Lever.BACKLOG_ELIMINATION: MappingProxyType(
        {LeverLevel.LOW: 0.5, LeverLevel.MEDIUM: 0.75, LeverLevel.HIGH: 0.9}
    ),
    Lever.RVU_INCREASE_EM: MappingProxyType(
        {LeverLevel.LOW: 0.001, LeverLevel.MEDIUM: 0.005, LeverLevel.HIGH: 0.015}
    ),
    Lever.OVER_CODING_REDUCTION: MappingProxyType(
        {LeverLevel.LOW: 0.3, LeverLevel.MEDIUM: 0.5, LeverLevel.HIGH: 0.67}
    ),
    Lever.UNDER_CODING_REDUCTION: MappingProxyType(
        {LeverLevel.LOW: 0.3, LeverLevel.MEDIUM: 0.5, LeverLevel.HIGH: 0.67}
    ),
})


LEVER_DESCRIPTIONS = {
    Lever.CODER_PRODUCTIVITY: (
        "Coder Productivity Gains",
        "Savings from increased coding efficiency and reduced manual work",
    ),
    Lever.BILLING_AUTOMATION: (
        "Billing Automation Savings",
        "Reduced billing staff time through automated claim processing",
    ),
    Lever.PHYSICIAN_TIME_SAVED: (
        "Physician Time Savings",
        "Time saved by physicians due to improved coding accuracy",
    ),
    Lever.TECHNOLOGY_COST_SAVED: (
        "Technology Cost Reduction",
        "Savings from eliminating legacy coding software licenses",
    ),
    Lever.CLAIM_DENIAL_REDUCTION: (
        "Claim Denial Reduction",
        "Reduced costs from fewer claim denials and rework",
    ),
    Lever.BACKLOG_ELIMINATION: (
        "Backlog Elimination",
        "Savings from eliminating coding backlogs and delays",
    ),
    Lever.RVU_INCREASE_EM: (
        "RVU Optimization",
        "Additional revenue from optimized E&M RVU coding accuracy",
    ),
    Lever.OVER_CODING_REDUCTION: (
        "Over-coding Reduction",
        "Compliance risk avoided by catching over-coded charts",
    ),
    Lever.UNDER_CODING_REDUCTION: (
        "Under-coding Reduction",
        "Revenue recovered from under-coded charts",
    ),
}


def get_multiplier(lever: Lever, level: LeverLevel) -> float:
    """Multiplier for a lever at a level."""
    return LEVER_MULTIPLIERS[Lever(lever)][LeverLevel(level)]


def selected_multiplier(selection: LeverSelection, lever: Lever) -> float:
    """Multiplier for the level currently selected for a lever."""
    return get_multiplier(lever, selection.level_for(lever))


def describe_levers() -> List[Dict[str, Any]]:
    """Lever table with labels, for clients rendering the selectors."""
    table = []
    for lever in Lever:
        label, description = LEVER_DESCRIPTIONS[lever]
        table.append({
            "lever": lever.value,
            "label": label,
            "description": description,
            "multipliers": {
                level.value: multiplier
                for level, multiplier in LEVER_MULTIPLIERS[lever].items()
            },
            "default_level": LeverLevel.MEDIUM.value,
        })
    return table
