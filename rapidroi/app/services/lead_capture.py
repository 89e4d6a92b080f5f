"""
Lead capture: forwards one captured email to the spreadsheet and to Slack.

Both sinks are independent; a failure in one never blocks the other and
nothing is raised to the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from rapidroi.app.config import Settings
from rapidroi.app.models.leads import LeadCaptureResult, LeadSource
from rapidroi.app.services.delivery import email_domain
from rapidroi.app.services.slack import (
    SlackNotifier,
    build_email_capture_blocks,
    build_pdf_request_blocks,
    build_sign_in_blocks,
)
from rapidroi.app.services.spreadsheet import (
    SpreadsheetClient,
    build_email_data,
    format_local_time,
)


logger = logging.getLogger(__name__)


class LeadCaptureService:
    def __init__(self, settings: Settings):
        self.spreadsheet = SpreadsheetClient(settings)
        self.slack = SlackNotifier(settings)

    def capture(
        self,
        email: str,
        source: LeadSource = LeadSource.ROI_CALCULATOR,
        subject: Optional[str] = None,
        body: Optional[str] = None,
        user_agent: Optional[str] = None,
        report_filename: Optional[str] = None,
    ) -> LeadCaptureResult:
        """
        Record a lead in the spreadsheet and announce it on Slack.

        The Slack message depends on the source: sign-ins and PDF requests get
        their own block layouts, everything else the generic capture layout.
        """
        source = LeadSource(source)
        now = datetime.now(timezone.utc)
        data = build_email_data(email, source, subject=subject, body=body, now=now)
        sheet_result = self.spreadsheet.append(data, user_agent=user_agent)

        local_time = format_local_time(now.astimezone())
        if source == LeadSource.SIGN_IN:
            text = f"User signed in: {email}"
            blocks = build_sign_in_blocks(email, local_time)
        elif source == LeadSource.PDF_REQUEST and report_filename:
            text = f"ROI report requested by {email}"
            blocks = build_pdf_request_blocks(email, report_filename, local_time)
        else:
            text = f"New email captured from {source.value}: {email}"
            blocks = build_email_capture_blocks(email, source, local_time)
        slack_result = self.slack.send(text, blocks)

        logger.info(
            "Lead from %s (domain %s): spreadsheet=%s slack=%s",
            source.value,
            email_domain(email),
            sheet_result.status.value,
            slack_result.status.value,
        )
        return LeadCaptureResult(
            email=email,
            source=source,
            spreadsheet=sheet_result,
            slack=slack_result,
        )
