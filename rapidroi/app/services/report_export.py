"""
JSON export document and plain-text share summary.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rapidroi.app.models.metrics import LeverSelection, ROIMetrics
from rapidroi.app.models.results import CalculationResult
from rapidroi.app.services.formatters import format_currency, format_percent


def export_filename(when: Optional[datetime] = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"roi-calculator-report-{when.date().isoformat()}.json"


def build_export_document(
    metrics: ROIMetrics,
    levers: LeverSelection,
    result: CalculationResult,
    when: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Everything needed to reproduce a calculation: inputs, levers and outputs."""
    when = when or datetime.now(timezone.utc)
    return {
        "timestamp": when.isoformat().replace("+00:00", "Z"),
        "metrics": metrics.model_dump(),
        "levers": {lever.value: level.value for lever, level in levers.levels.items()},
        "calculations": result.model_dump(mode="json"),
    }


def build_share_text(result: CalculationResult) -> str:
    summary = result.summary
    return (
        "RapidClaims ROI Analysis\n"
        f"Total Annual Impact: {format_currency(summary.total_impact)}\n"
        f"Cost Savings: {format_currency(summary.total_cost_savings)}\n"
        f"Revenue Increase: {format_currency(summary.total_revenue_increase)}\n"
        f"Risk Reduction: {format_currency(summary.total_risk_reduction)}\n"
        f"ROI: {format_percent(summary.roi)}"
    )
