"""
Pydantic models for the RapidROI gateway.
"""

from rapidroi.app.models.leads import (
    DeliveryResult,
    DeliveryStatus,
    EmailData,
    LeadSource,
    SessionState,
)
from rapidroi.app.models.metrics import (
    CalculatorVariant,
    Lever,
    LeverLevel,
    LeverSelection,
    MetricAction,
    ROIMetrics,
)
from rapidroi.app.models.results import CalculationResult, ExecutiveSummary

__all__ = [
    "CalculationResult",
    "CalculatorVariant",
    "DeliveryResult",
    "DeliveryStatus",
    "EmailData",
    "ExecutiveSummary",
    "LeadSource",
    "Lever",
    "LeverLevel",
    "LeverSelection",
    "MetricAction",
    "ROIMetrics",
    "SessionState",
]
