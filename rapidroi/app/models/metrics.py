"""
Calculator input models: organizational metrics and lever selections.

ROIMetrics is the flat record of organizational parameters the calculator
works from. All values are finite and within [0, MAX_METRIC_VALUE];
percentages marked "percent" are whole numbers (25 = 25%), values marked
"fraction" are 0-1.
"""

from enum import Enum
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Upper bound for every metric; keeps every product in the model finite
MAX_METRIC_VALUE = 1e12


def _metric(default: float, description: Optional[str] = None):
    return Field(default=default, ge=0, le=MAX_METRIC_VALUE, description=description)


class ROIMetrics(BaseModel):
    """Organizational inputs for the ROI model."""

    model_config = ConfigDict(allow_inf_nan=False)

    # Basic inputs
    revenue_claimed: float = _metric(23_000_000, "Annual revenue claimed (USD)")
    number_of_coders: float = _metric(25, "Medical coders on staff")
    number_of_billers: float = _metric(9, "Billers on staff")
    number_of_physicians: float = _metric(14, "Physicians")
    claim_denied_percent: float = _metric(25, "Claims denied (percent)")

    # Aggregate claims data
    claims_per_annum: float = _metric(153_333)
    average_cost_per_claim: float = _metric(150, "USD per claim")
    charts_processed_per_annum: float = _metric(153_333)

    # Coding costs
    salary_per_coder: float = _metric(60_000)
    overhead_cost_percent: float = _metric(38, "Percent")
    number_of_encoder_licenses: float = _metric(25)
    average_cost_per_license_per_month: float = _metric(250)
    salary_per_biller: float = _metric(45_000)
    salary_per_physician: float = _metric(250_000)
    avg_time_per_physician_per_chart: float = _metric(2, "Minutes a physician spends per chart")
    avg_time_per_coder_per_chart: float = _metric(0.33, "Hours a coder spends per chart")
    charts_per_coder_per_day: float = _metric(24.34)

    # Collection costs
    cost_per_denied_claim: float = _metric(42)

    # Capital costs
    coding_backlog_percent: float = _metric(5, "Percent")
    days_per_chart_in_backlog: float = _metric(20)
    cost_of_capital: float = _metric(5)

    # RVUs
    rvus_coded_per_annum: float = _metric(718_750)
    weighted_average_gpci: float = _metric(1.03)

    # Audit data
    over_coding_percent: float = _metric(13, "Percent")
    under_coding_percent: float = _metric(10, "Percent")
    avg_billable_codes_per_chart: float = _metric(4)
    percent_over_coded_charts: float = _metric(0.05, "Fraction")
    percent_reduction_ncci: float = _metric(0.67, "Fraction")
    compliance_cost_per_code: float = _metric(14, "USD")


METRIC_KEYS = tuple(ROIMetrics.model_fields.keys())


class LeverLevel(str, Enum):
    """Impact level selectable for each lever."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Lever(str, Enum):
    """Business drivers with a selectable impact level."""

    CODER_PRODUCTIVITY = "coder_productivity"
    BILLING_AUTOMATION = "billing_automation"
    PHYSICIAN_TIME_SAVED = "physician_time_saved"
    TECHNOLOGY_COST_SAVED = "technology_cost_saved"
    CLAIM_DENIAL_REDUCTION = "claim_denial_reduction"
    BACKLOG_ELIMINATION = "backlog_elimination"
    RVU_INCREASE_EM = "rvu_increase_em"
    OVER_CODING_REDUCTION = "over_coding_reduction"
    UNDER_CODING_REDUCTION = "under_coding_reduction"


class LeverSelection(BaseModel):
    """
    Selected level per lever.

    Missing levers default to medium, so a partial mapping is accepted.
    """

    levels: Dict[Lever, LeverLevel] = Field(default_factory=dict)

    @model_validator(mode="after")
    def fill_missing_levers(self):
        for lever in Lever:
            self.levels.setdefault(lever, LeverLevel.MEDIUM)
        return self

    def level_for(self, lever: Lever) -> LeverLevel:
        return self.levels[lever]

    @classmethod
    def uniform(cls, level: LeverLevel) -> "LeverSelection":
        """Selection with every lever at the same level."""
        return cls(levels={lever: level for lever in Lever})


class CalculatorVariant(str, Enum):
    """
    Which calculator's savings cap applies.

    The combined calculator caps cost savings at 65% of revenue; the
    standalone calculator at 80%.
    """

    COMBINED = "combined"
    STANDALONE = "standalone"


class MetricAction(BaseModel):
    """
    A single edit applied to the metrics state.

    - set: assign value to key (source "slider" additionally clamps revenue)
    - increment / decrement: move key by step (decrement floors at 0)
    - reset: restore defaults
    """

    model_config = ConfigDict(allow_inf_nan=False)

    type: Literal["set", "increment", "decrement", "reset"]
    key: Optional[str] = Field(default=None, description="ROIMetrics field name")
    value: Optional[float] = None
    step: float = Field(default=1.0, ge=0, le=MAX_METRIC_VALUE)
    source: Literal["input", "slider"] = "input"

    @field_validator("key")
    @classmethod
    def key_must_be_metric(cls, v):
        if v is not None and v not in METRIC_KEYS:
            raise ValueError(f"Unknown metric '{v}'")
        return v

    @model_validator(mode="after")
    def check_required_fields(self):
        if self.type != "reset" and self.key is None:
            raise ValueError(f"'{self.type}' action requires a key")
        if self.type == "set" and self.value is None:
            raise ValueError("'set' action requires a value")
        return self


class CalculateRequest(BaseModel):
    """Inputs for one evaluation; omitted parts use defaults."""

    metrics: ROIMetrics = Field(default_factory=ROIMetrics)
    levers: LeverSelection = Field(default_factory=LeverSelection)
    variant: CalculatorVariant = CalculatorVariant.COMBINED


class ReduceRequest(BaseModel):
    """Current state plus one action for the metrics reducer."""

    state: ROIMetrics = Field(default_factory=ROIMetrics)
    action: MetricAction
