"""
ROI (Return on Investment) calculation service for RapidClaims.

This module provides the financial model behind the calculator: cost savings
from coding automation, revenue increase from RVU optimization and risk
reduction from catching over-coded charts, plus the implementation cost and
clamped ROI percentage.

Pure computation - no I/O, fully deterministic.
"""

import math
from typing import Optional

from rapidroi.app.models.metrics import (
    CalculatorVariant,
    Lever,
    LeverSelection,
    ROIMetrics,
)
from rapidroi.app.models.results import (
    CalculationResult,
    CostSavingsBreakdown,
    ExecutiveSummary,
    OperationalCostBreakdown,
)
from rapidroi.app.services.levers import selected_multiplier


# Cost savings may not exceed this share of revenue claimed
COST_SAVINGS_CAPS = {
    CalculatorVariant.COMBINED: 0.65,
    CalculatorVariant.STANDALONE: 0.80,
}

CODER_HOURS_PER_YEAR = 2100
PHYSICIAN_HOURS_PER_YEAR = 40 * 52
CAPITAL_DAY_COUNT = 360
AR_RECOVERY_FACTOR = 0.2
RVU_CONVERSION_FACTOR = 32.7442

IMPLEMENTATION_BASE_COST = 150_000
IMPLEMENTATION_SCALE = 0.8
ROI_MIN = 0.0
ROI_MAX = 400.0

OPERATIONAL_WORKING_DAYS = 250
SETUP_COST_RATIO = 0.15


def implementation_cost(revenue_claimed: float) -> float:
    """One-off implementation cost, growing with the square root of revenue in $M."""
    return IMPLEMENTATION_BASE_COST * (
        1 + math.sqrt(revenue_claimed / 1_000_000) * IMPLEMENTATION_SCALE
    )


def clamp_roi(value: float) -> float:
    """Clamp into [ROI_MIN, ROI_MAX]; NaN counts as no return."""
    if math.isnan(value):
        return ROI_MIN
    return min(max(value, ROI_MIN), ROI_MAX)


def calculate_cost_savings(metrics: ROIMetrics, levers: LeverSelection) -> CostSavingsBreakdown:
    """The six uncapped cost-saving components."""
    m = metrics
    charts = m.charts_processed_per_annum

    # Coder productivity: share of coder time freed, i/(1+i)
    improvement = selected_multiplier(levers, Lever.CODER_PRODUCTIVITY)
    coder_productivity_savings = (
        charts
        * (improvement / (1 + improvement))
        * m.avg_time_per_coder_per_chart
        * (m.salary_per_coder / CODER_HOURS_PER_YEAR)
    )

    # Billing automation: lever is looked up but the full biller cost is counted
    selected_multiplier(levers, Lever.BILLING_AUTOMATION)
    billing_automation_savings = m.number_of_billers * m.salary_per_biller

    physician_time_savings = (
        (m.avg_time_per_physician_per_chart / 60)
        * charts
        * m.number_of_physicians
        * (m.salary_per_physician / PHYSICIAN_HOURS_PER_YEAR)
        * selected_multiplier(levers, Lever.PHYSICIAN_TIME_SAVED)
    )

    technology_cost_savings = (
        m.number_of_encoder_licenses
        * m.average_cost_per_license_per_month
        * selected_multiplier(levers, Lever.TECHNOLOGY_COST_SAVED)
    )

    claim_denial_savings = (
        m.claims_per_annum
        * (m.claim_denied_percent / 100)
        * selected_multiplier(levers, Lever.CLAIM_DENIAL_REDUCTION)
        * m.cost_per_denied_claim
    )

    avg_chart_value = m.revenue_claimed / max(charts, 1)
    ar_days_savings = (
        charts
        * avg_chart_value
        * (m.coding_backlog_percent / 100)
        * m.days_per_chart_in_backlog
        * selected_multiplier(levers, Lever.BACKLOG_ELIMINATION)
        * (m.cost_of_capital / CAPITAL_DAY_COUNT)
        * AR_RECOVERY_FACTOR
    )

    return CostSavingsBreakdown(
        coder_productivity_savings=coder_productivity_savings,
        billing_automation_savings=billing_automation_savings,
        physician_time_savings=physician_time_savings,
        technology_cost_savings=technology_cost_savings,
        claim_denial_savings=claim_denial_savings,
        ar_days_savings=ar_days_savings,
    )


def calculate_roi(
    metrics: ROIMetrics,
    levers: Optional[LeverSelection] = None,
    variant: CalculatorVariant = CalculatorVariant.COMBINED,
) -> CalculationResult:
    """
    Calculate the full ROI projection for a set of metrics and lever levels.

    Calculation steps:
    1. Compute the six cost-saving components
    2. Cap their sum at a share of revenue (0.65 combined, 0.80 standalone)
    3. Compute RVU revenue increase
    4. Compute over-coding risk reduction
    5. Sum the three buckets into total impact
    6. Compute implementation cost and ROI percent, clamped to [0, 400]

    Args:
        metrics: Organizational inputs
        levers: Selected level per lever (all medium when omitted)
        variant: Which calculator's savings cap applies

    Returns:
        CalculationResult with sub-amounts, bucket totals and ROI
    """
    levers = levers or LeverSelection()
    variant = CalculatorVariant(variant)
    m = metrics

    # Step 1: Cost savings components
    cost_savings = calculate_cost_savings(m, levers)
    uncapped = cost_savings.total

    # Step 2: Cap
    cap = COST_SAVINGS_CAPS[variant]
    cap_amount = m.revenue_claimed * cap
    total_cost_savings = min(uncapped, cap_amount)

    # Step 3: Revenue increase from optimized E&M RVUs
    rvu_increase = (
        m.rvus_coded_per_annum
        * selected_multiplier(levers, Lever.RVU_INCREASE_EM)
        * m.weighted_average_gpci
        * RVU_CONVERSION_FACTOR
    )

    # Step 4: Risk reduction (compliance cost of over-coded codes avoided)
    over_coding_reduction = (
        m.charts_processed_per_annum
        * m.percent_over_coded_charts
        * m.percent_reduction_ncci
        * m.compliance_cost_per_code
    )

    # Step 5: Total impact
    total_impact = total_cost_savings + rvu_increase + over_coding_reduction

    # Step 6: ROI (implementation cost is always positive)
    impl_cost = implementation_cost(m.revenue_claimed)
    roi = clamp_roi(total_impact / impl_cost * 100)

    return CalculationResult(
        cost_savings=cost_savings,
        rvu_increase=rvu_increase,
        over_coding_reduction=over_coding_reduction,
        uncapped_cost_savings=uncapped,
        cost_savings_cap=cap,
        cost_savings_capped=uncapped > cap_amount,
        summary=ExecutiveSummary(
            total_cost_savings=total_cost_savings,
            total_revenue_increase=rvu_increase,
            total_risk_reduction=over_coding_reduction,
            total_impact=total_impact,
            implementation_cost=impl_cost,
            roi=roi,
        ),
        variant=variant,
        levers=dict(levers.levels),
    )


def _share(part: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return part / total * 100


def calculate_operational_costs(metrics: ROIMetrics) -> OperationalCostBreakdown:
    """
    Current-state operating costs: coding staff, denied claims and backlog
    carrying cost, with each cost's share of the total.
    """
    m = metrics

    total_coding_costs = (
        m.number_of_coders * m.salary_per_coder * (1 + m.overhead_cost_percent / 100)
    )
    denied_claims_cost = (
        m.claims_per_annum * (m.claim_denied_percent / 100) * m.cost_per_denied_claim
    )
    backlog_cost = (
        m.charts_processed_per_annum
        * (m.coding_backlog_percent / 100)
        * m.days_per_chart_in_backlog
        * (m.cost_of_capital / 100)
        / 365
    )
    total = total_coding_costs + denied_claims_cost + backlog_cost

    capacity = m.number_of_coders * OPERATIONAL_WORKING_DAYS * m.charts_per_coder_per_day
    efficiency_ratio = m.charts_processed_per_annum / max(capacity, 1)

    return OperationalCostBreakdown(
        total_coding_costs=total_coding_costs,
        denied_claims_cost=denied_claims_cost,
        backlog_cost=backlog_cost,
        total_operational_costs=total,
        coding_costs_share=_share(total_coding_costs, total),
        denied_claims_share=_share(denied_claims_cost, total),
        backlog_share=_share(backlog_cost, total),
        efficiency_ratio=efficiency_ratio,
        one_time_setup_cost=total * SETUP_COST_RATIO,
    )
