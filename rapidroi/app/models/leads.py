"""
Lead capture, session and outbound delivery models.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from rapidroi.app.models.metrics import CalculatorVariant, LeverSelection, ROIMetrics


EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class LeadSource(str, Enum):
    """Where a lead was captured; sent verbatim as the payload's source."""

    ROI_CALCULATOR = "ROI Calculator"
    PDF_REQUEST = "PDF Request"
    SIGN_IN = "Sign In"
    OTHER = "Other"


class DeliveryStatus(str, Enum):
    """
    Outcome of an outbound call.

    unknown means the sink accepted the request without a readable
    confirmation (e.g. a redirect we do not follow).
    """

    SENT = "sent"
    UNKNOWN = "unknown"
    FAILED = "failed"


class DeliveryResult(BaseModel):
    """Tagged result of an outbound webhook/Slack/email call. Never raised."""

    ok: bool
    status: DeliveryStatus
    reason: Optional[str] = None

    @classmethod
    def sent(cls) -> "DeliveryResult":
        return cls(ok=True, status=DeliveryStatus.SENT)

    @classmethod
    def unknown(cls, reason: Optional[str] = None) -> "DeliveryResult":
        return cls(ok=True, status=DeliveryStatus.UNKNOWN, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryResult":
        return cls(ok=False, status=DeliveryStatus.FAILED, reason=reason)


class EmailData(BaseModel):
    """Lead record sent to the spreadsheet webhook."""

    sender: str
    subject: str
    date: str = Field(..., description="Human-readable local time")
    body: str
    source: LeadSource
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")


class EmailAttachment(BaseModel):
    filename: str
    content_base64: str = Field(..., description="Base64 without data URL prefix")
    content_type: str = "application/pdf"


class EmailPayload(BaseModel):
    """Message handed to the email webhook."""

    to: str
    subject: str
    text: Optional[str] = None
    html: Optional[str] = None
    attachments: List[EmailAttachment] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EmailRequest(BaseModel):
    """Body carrying a user-supplied email address."""

    email: str = Field(..., max_length=320)

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return v.strip()


class LeadCaptureRequest(EmailRequest):
    source: LeadSource = LeadSource.ROI_CALCULATOR
    subject: Optional[str] = None
    body: Optional[str] = None


class LeadCaptureResult(BaseModel):
    """Per-sink outcome of forwarding one lead."""

    email: str
    source: LeadSource
    spreadsheet: DeliveryResult
    slack: DeliveryResult


class SessionState(BaseModel):
    """Sign-in state of one calculator session."""

    session_id: str
    signed_in: bool = False
    email: Optional[str] = None
    signed_in_at: Optional[str] = None


class ReportRequest(BaseModel):
    """Inputs for report generation; omitted parts use defaults."""

    metrics: ROIMetrics = Field(default_factory=ROIMetrics)
    levers: LeverSelection = Field(default_factory=LeverSelection)
    variant: CalculatorVariant = CalculatorVariant.COMBINED
    company_name: Optional[str] = Field(default=None, max_length=200)


class EmailReportRequest(ReportRequest):
    email: str = Field(..., max_length=320)


class EmailReportResponse(BaseModel):
    email: str
    filename: str
    delivery: DeliveryResult
    lead: LeadCaptureResult
    pdf_base64: Optional[str] = Field(
        default=None,
        description="Inline PDF when the email webhook could not take it",
    )
