"""
Email delivery through a configurable webhook (Make, Zapier, Apps Script, ...).

The webhook receives the message as JSON; when the JSON POST fails at the
transport level the message is re-sent form-encoded, with attachments as a
JSON string field.
"""

import json
import logging
from typing import Any, Dict

import requests

from rapidroi.app.config import Settings
from rapidroi.app.models.leads import DeliveryResult, EmailPayload
from rapidroi.app.services import delivery


logger = logging.getLogger(__name__)


class EmailReportSender:
    """Sends an EmailPayload to the email webhook. Never raises."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _json_body(self, payload: EmailPayload) -> Dict[str, Any]:
        body = payload.model_dump(exclude_none=True)
        if self.settings.email_webhook_token:
            body["token"] = self.settings.email_webhook_token
        body["triggered_from"] = self.settings.triggered_from
        return body

    def _form_body(self, payload: EmailPayload) -> Dict[str, str]:
        form = {"to": payload.to, "subject": payload.subject}
        if payload.text:
            form["text"] = payload.text
        if payload.html:
            form["html"] = payload.html
        if self.settings.email_webhook_token:
            form["token"] = self.settings.email_webhook_token
        if payload.attachments:
            form["attachments"] = json.dumps(
                [attachment.model_dump() for attachment in payload.attachments]
            )
        return form

    def send(self, payload: EmailPayload) -> DeliveryResult:
        url = self.settings.email_webhook_url
        if not url:
            logger.warning("Email webhook URL not configured; report not emailed")
            return DeliveryResult.failed(reason="missing_webhook_url")

        timeout = self.settings.webhook_timeout_seconds
        try:
            response = delivery.post(url, timeout, json=self._json_body(payload))
            result = delivery.result_from_status(response.status_code)
            logger.info("Email webhook (JSON): %s", result.status.value)
            return result
        except requests.RequestException as e:
            logger.warning("Email JSON POST failed (%s); trying form-encoded", type(e).__name__)

        try:
            response = delivery.post(url, timeout, data=self._form_body(payload))
            result = delivery.result_from_status(response.status_code)
            logger.info("Email webhook (form): %s", result.status.value)
            return result
        except requests.RequestException as e:
            logger.error("Email form POST failed (%s)", type(e).__name__)
            return DeliveryResult.failed(reason="all_strategies_failed")
