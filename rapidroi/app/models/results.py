"""
Calculator output models.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from rapidroi.app.models.metrics import (
    CalculatorVariant,
    Lever,
    LeverLevel,
    ROIMetrics,
)


class CostSavingsBreakdown(BaseModel):
    """The six cost-saving components (USD/year)."""

    coder_productivity_savings: float
    billing_automation_savings: float
    physician_time_savings: float
    technology_cost_savings: float
    claim_denial_savings: float
    ar_days_savings: float = Field(..., description="Backlog elimination / A/R days")

    @property
    def total(self) -> float:
        return (
            self.coder_productivity_savings
            + self.billing_automation_savings
            + self.physician_time_savings
            + self.technology_cost_savings
            + self.claim_denial_savings
            + self.ar_days_savings
        )


class ExecutiveSummary(BaseModel):
    """Bucket totals shown in the Executive Summary panel."""

    total_cost_savings: float = Field(..., description="Capped sum of cost savings")
    total_revenue_increase: float
    total_risk_reduction: float
    total_impact: float
    implementation_cost: float
    roi: float = Field(..., ge=0, le=400, description="ROI percent, clamped to [0, 400]")


class CalculationResult(BaseModel):
    """
    Full evaluator output.

    Pure function of (ROIMetrics, LeverSelection, variant); recomputed on
    every input change.
    """

    cost_savings: CostSavingsBreakdown
    rvu_increase: float
    over_coding_reduction: float
    uncapped_cost_savings: float
    cost_savings_cap: float = Field(..., description="Revenue multiple used as cap")
    cost_savings_capped: bool
    summary: ExecutiveSummary
    variant: CalculatorVariant
    levers: Dict[Lever, LeverLevel]


class OperationalCostBreakdown(BaseModel):
    """Current-state operating costs (Analytics view)."""

    total_coding_costs: float
    denied_claims_cost: float
    backlog_cost: float
    total_operational_costs: float
    coding_costs_share: float = Field(..., description="Percent of total")
    denied_claims_share: float = Field(..., description="Percent of total")
    backlog_share: float = Field(..., description="Percent of total")
    efficiency_ratio: float
    one_time_setup_cost: float


class CalculateResponse(BaseModel):
    """
    Response of the calculate endpoint.

    Results are withheld (locked=True) until the session has signed in;
    the metrics are always echoed so inputs and derived fields stay visible.
    """

    locked: bool
    metrics: ROIMetrics
    result: Optional[CalculationResult] = None
