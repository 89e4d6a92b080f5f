"""
Lead capture endpoint.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

from rapidroi.app.config import Settings, get_settings
from rapidroi.app.models.leads import LeadCaptureRequest
from rapidroi.app.routes.session import invalid_email_error
from rapidroi.app.security.rate_limit import limiter
from rapidroi.app.services.lead_capture import LeadCaptureService
from rapidroi.app.services.validation import is_valid_email


router = APIRouter(prefix="/v1/leads", tags=["leads"])


@router.post("/capture", status_code=status.HTTP_202_ACCEPTED)
@limiter.limit("20/minute")
async def capture_lead(
    request: Request,  # Required for rate limiting
    body: LeadCaptureRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
):
    """
    Accept a captured email and forward it to the spreadsheet and Slack.

    Forwarding happens after the response; the caller only learns that the
    lead was accepted, never whether the sinks received it.
    """
    if not is_valid_email(body.email):
        raise invalid_email_error()

    background_tasks.add_task(
        LeadCaptureService(settings).capture,
        body.email,
        body.source,
        subject=body.subject,
        body=body.body,
        user_agent=request.headers.get("user-agent"),
    )
    return {"accepted": True, "email": body.email, "source": body.source.value}
