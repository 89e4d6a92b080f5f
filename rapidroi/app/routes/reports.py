"""
Report endpoints: PDF download, emailed PDF, JSON export and share text.
"""

import base64
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from rapidroi.app.config import Settings, get_settings
from rapidroi.app.models.leads import (
    EmailAttachment,
    EmailPayload,
    EmailReportRequest,
    EmailReportResponse,
    LeadSource,
    ReportRequest,
)
from rapidroi.app.models.results import CalculationResult
from rapidroi.app.routes.session import invalid_email_error, require_signed_in
from rapidroi.app.security.rate_limit import limiter
from rapidroi.app.services.delivery import email_domain
from rapidroi.app.services.email_sender import EmailReportSender
from rapidroi.app.services.formatters import format_currency
from rapidroi.app.services.lead_capture import LeadCaptureService
from rapidroi.app.services.report_export import (
    build_export_document,
    build_share_text,
    export_filename,
)
from rapidroi.app.services.report_pdf import generate_report_pdf, report_filename
from rapidroi.app.services.roi import calculate_roi
from rapidroi.app.services.validation import is_valid_email


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reports", tags=["reports"])

EMAIL_REPORT_PREFIX = "ROI-Report"


def _render_pdf(body: ReportRequest, result: CalculationResult) -> bytes:
    try:
        return generate_report_pdf(body.metrics, result, company_name=body.company_name)
    except Exception as e:
        logger.error("PDF generation failed: %s", type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "pdf_generation_failed",
                "message": "The report could not be generated. Please try again.",
            },
        )


@router.post("/pdf", dependencies=[Depends(require_signed_in)])
@limiter.limit("30/minute")
def download_pdf(
    request: Request,  # Required for rate limiting
    body: ReportRequest,
) -> Response:
    """
    Generate the ROI report as a PDF download.

    Requires a signed-in session (403 sign_in_required otherwise).

    Returns:
        PDF file as application/pdf named rapidroi-analysis-<date>.pdf
    """
    result = calculate_roi(body.metrics, body.levers, body.variant)
    pdf_bytes = _render_pdf(body, result)
    filename = report_filename()
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# Plain def: PDF rendering and webhook posts run in the threadpool
@router.post("/email", response_model=EmailReportResponse)
@limiter.limit("10/minute")
def email_report(
    request: Request,  # Required for rate limiting
    body: EmailReportRequest,
    settings: Settings = Depends(get_settings),
) -> EmailReportResponse:
    """
    Email the ROI report as a PDF attachment.

    The address is recorded as a "PDF Request" lead. When the email webhook
    is not configured the PDF comes back inline (pdf_base64) so the client
    can offer it as a download instead.

    Errors:
    - 422 invalid_email
    - 500 pdf_generation_failed
    """
    email = body.email.strip()
    if not is_valid_email(email):
        raise invalid_email_error()

    result = calculate_roi(body.metrics, body.levers, body.variant)
    pdf_bytes = _render_pdf(body, result)
    filename = report_filename(prefix=EMAIL_REPORT_PREFIX)
    pdf_base64 = base64.b64encode(pdf_bytes).decode("ascii")

    lead = LeadCaptureService(settings).capture(
        email,
        LeadSource.PDF_REQUEST,
        user_agent=request.headers.get("user-agent"),
        report_filename=filename,
    )

    summary = result.summary
    payload = EmailPayload(
        to=email,
        subject="Your RapidClaims ROI Report",
        text=(
            "Attached is your personalized ROI blueprint. "
            f"Estimated annual financial impact: {format_currency(summary.total_impact)}."
        ),
        attachments=[EmailAttachment(filename=filename, content_base64=pdf_base64)],
        metadata={"source": LeadSource.PDF_REQUEST.value, "filename": filename},
    )
    delivery = EmailReportSender(settings).send(payload)
    logger.info(
        "Report email to domain %s: %s", email_domain(email), delivery.status.value
    )

    return EmailReportResponse(
        email=email,
        filename=filename,
        delivery=delivery,
        lead=lead,
        pdf_base64=None if delivery.ok else pdf_base64,
    )


@router.post("/export", dependencies=[Depends(require_signed_in)])
async def export_report(body: ReportRequest) -> JSONResponse:
    """
    Export inputs, lever levels and results as a JSON document
    (roi-calculator-report-<date>.json).
    """
    result = calculate_roi(body.metrics, body.levers, body.variant)
    document = build_export_document(body.metrics, body.levers, result)
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@router.post("/share-text", dependencies=[Depends(require_signed_in)])
async def share_text(body: ReportRequest) -> Dict[str, str]:
    """Plain-text summary for sharing."""
    result = calculate_roi(body.metrics, body.levers, body.variant)
    return {"text": build_share_text(result)}
