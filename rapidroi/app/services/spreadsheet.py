"""
Spreadsheet webhook client.

Leads are appended to a sheet through an opaque webhook (Google Apps Script,
Zapier, ...). The form-encoded body is tried first because Apps Script
exposes it directly as e.parameter; JSON is the fallback when the form POST
fails at the transport level.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from rapidroi.app.config import Settings
from rapidroi.app.models.leads import DeliveryResult, EmailData, LeadSource
from rapidroi.app.services import delivery


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "rapidroi-gateway"


def format_local_time(moment: datetime) -> str:
    """Human-readable timestamp used in lead records and Slack messages."""
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def local_time_now() -> str:
    return format_local_time(datetime.now(timezone.utc).astimezone())


def build_email_data(
    email: str,
    source: LeadSource = LeadSource.ROI_CALCULATOR,
    subject: Optional[str] = None,
    body: Optional[str] = None,
    now: Optional[datetime] = None,
) -> EmailData:
    """Build the lead record for a captured email."""
    source = LeadSource(source)
    now = now or datetime.now(timezone.utc)
    local_time = format_local_time(now.astimezone())
    return EmailData(
        sender=email,
        subject=subject or f"{source.value} - Email Capture",
        date=local_time,
        body=body or f"Email captured from {source.value} at {local_time}",
        source=source,
        timestamp=now.isoformat().replace("+00:00", "Z"),
    )


class SpreadsheetClient:
    """Appends lead records to the configured spreadsheet webhook."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_payload(self, data: EmailData, user_agent: Optional[str] = None) -> Dict[str, str]:
        payload = {
            "sender": data.sender,
            "subject": data.subject,
            "date": data.date,
            "body": data.body,
            "source": data.source.value,
            "timestamp": data.timestamp,
            "triggered_from": self.settings.triggered_from,
            "userAgent": user_agent or DEFAULT_USER_AGENT,
        }
        if self.settings.spreadsheet_webhook_token:
            payload["token"] = self.settings.spreadsheet_webhook_token
        return payload

    def append(self, data: EmailData, user_agent: Optional[str] = None) -> DeliveryResult:
        """
        Send one lead record. Never raises.

        Returns:
            DeliveryResult; failed/missing_webhook_url when no URL is configured,
            failed/all_strategies_failed when both encodings fail in transport
        """
        url = self.settings.spreadsheet_webhook_url
        if not url:
            logger.warning("Spreadsheet webhook URL not configured; lead not forwarded")
            return DeliveryResult.failed(reason="missing_webhook_url")

        payload = self.build_payload(data, user_agent)
        timeout = self.settings.webhook_timeout_seconds

        form = dict(payload)
        form["email"] = payload["sender"]
        try:
            response = delivery.post(url, timeout, data=form)
            result = delivery.result_from_status(response.status_code)
            logger.info(
                "Spreadsheet lead (%s) sent form-encoded: %s",
                data.source.value, result.status.value,
            )
            return result
        except requests.RequestException as e:
            logger.warning("Form-encoded spreadsheet POST failed (%s); trying JSON", type(e).__name__)

        try:
            response = delivery.post(url, timeout, json=payload)
            result = delivery.result_from_status(response.status_code)
            logger.info(
                "Spreadsheet lead (%s) sent as JSON: %s",
                data.source.value, result.status.value,
            )
            return result
        except requests.RequestException as e:
            logger.error("JSON spreadsheet POST failed (%s)", type(e).__name__)

        return DeliveryResult.failed(reason="all_strategies_failed")
