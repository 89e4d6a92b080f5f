"""
ROI calculator endpoints.

Pure computation over the posted inputs; the only state consulted is the
session's sign-in flag, which decides whether results are returned.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request

from rapidroi.app.models.metrics import CalculateRequest, ReduceRequest, ROIMetrics
from rapidroi.app.models.results import CalculateResponse, OperationalCostBreakdown
from rapidroi.app.routes.session import is_signed_in
from rapidroi.app.security.rate_limit import limiter
from rapidroi.app.services.levers import describe_levers
from rapidroi.app.services.metrics_reducer import reduce_metrics
from rapidroi.app.services.roi import calculate_operational_costs, calculate_roi


router = APIRouter(prefix="/v1/roi", tags=["roi-calculator"])


@router.get("/defaults", response_model=ROIMetrics)
async def get_defaults() -> ROIMetrics:
    """Default organizational inputs."""
    return ROIMetrics()


@router.get("/levers")
async def get_levers() -> List[Dict[str, Any]]:
    """Lever table: label, description and low/medium/high multipliers per lever."""
    return describe_levers()


@router.post("/calculate", response_model=CalculateResponse)
@limiter.limit("120/minute")
async def calculate(
    request: Request,  # Required for rate limiting
    body: CalculateRequest,
    signed_in: bool = Depends(is_signed_in),
) -> CalculateResponse:
    """
    Evaluate the ROI model for the posted metrics and lever levels.

    Results (sub-amounts, capped totals, ROI) are returned only to a
    signed-in session. Anonymous callers get locked=true with the metrics
    echoed back and no result.

    Request body (all parts optional):
    ```json
    {
        "metrics": {"revenue_claimed": 23000000, "number_of_coders": 25},
        "levers": {"levels": {"coder_productivity": "high"}},
        "variant": "combined"
    }
    ```
    """
    if not signed_in:
        return CalculateResponse(locked=True, metrics=body.metrics)

    result = calculate_roi(body.metrics, body.levers, body.variant)
    return CalculateResponse(locked=False, metrics=body.metrics, result=result)


@router.post("/metrics/reduce", response_model=ROIMetrics)
async def reduce(body: ReduceRequest) -> ROIMetrics:
    """
    Apply one edit to the metrics state and return the new state.

    Dependent fields are recomputed, e.g. setting revenue_claimed updates
    claims, charts, RVUs and charts per coder per day.
    """
    return reduce_metrics(body.state, body.action)


@router.post("/breakdown", response_model=OperationalCostBreakdown)
async def breakdown(metrics: ROIMetrics) -> OperationalCostBreakdown:
    """Current-state operational costs for the posted metrics."""
    return calculate_operational_costs(metrics)
