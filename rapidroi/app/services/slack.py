"""
Slack notifications.

Two delivery modes, picked from Settings:
- bot mode: chat.postMessage with a bearer token, when token and channel are set
- webhook mode: an incoming webhook URL
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from rapidroi.app.config import Settings
from rapidroi.app.models.leads import DeliveryResult, DeliveryStatus, LeadSource
from rapidroi.app.services import delivery


logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


def _field(label: str, value: str) -> Dict[str, str]:
    return {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}


def _header(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_sign_in_blocks(email: str, timestamp_local: str) -> List[Dict[str, Any]]:
    return [
        _header(":white_check_mark: *User Signed In*"),
        {
            "type": "section",
            "fields": [_field("Email", email), _field("Time", timestamp_local)],
        },
    ]


def build_email_capture_blocks(
    email: str,
    source: LeadSource = LeadSource.ROI_CALCULATOR,
    timestamp_local: str = "",
) -> List[Dict[str, Any]]:
    return [
        _header(":incoming_envelope: *Email Captured*"),
        {
            "type": "section",
            "fields": [
                _field("Email", email),
                _field("Source", LeadSource(source).value),
                _field("Time", timestamp_local),
            ],
        },
    ]


def build_pdf_request_blocks(email: str, filename: str, timestamp_local: str) -> List[Dict[str, Any]]:
    return [
        _header(":page_facing_up: *ROI Report Requested*"),
        {
            "type": "section",
            "fields": [
                _field("Email", email),
                _field("Report", filename),
                _field("Time", timestamp_local),
            ],
        },
    ]


class SlackNotifier:
    """Sends messages to Slack. Never raises."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def send(self, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> DeliveryResult:
        if self.settings.slack_bot_configured:
            return self._send_bot(text, blocks)
        if self.settings.slack_webhook_url:
            return self._send_webhook(text, blocks)
        logger.warning("Slack not configured; message dropped")
        return DeliveryResult.failed(reason="missing_slack_config")

    def _send_bot(self, text: str, blocks: Optional[List[Dict[str, Any]]]) -> DeliveryResult:
        payload: Dict[str, Any] = {"channel": self.settings.slack_channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        headers = {"Authorization": f"Bearer {self.settings.slack_bot_token}"}
        try:
            response = delivery.post(
                SLACK_POST_MESSAGE_URL,
                self.settings.webhook_timeout_seconds,
                json=payload,
                headers=headers,
            )
        except requests.RequestException as e:
            logger.error("Slack chat.postMessage failed (%s)", type(e).__name__)
            return DeliveryResult.failed(reason="request_error")

        result = delivery.result_from_status(response.status_code)
        if result.status != DeliveryStatus.SENT:
            return result

        # Slack answers 200 with {"ok": false, "error": ...} on API errors
        try:
            body = response.json()
        except ValueError:
            return DeliveryResult.unknown(reason="unreadable_response")
        if not body.get("ok"):
            error = body.get("error", "unknown_error")
            logger.warning("Slack API rejected message: %s", error)
            return DeliveryResult.failed(reason=f"slack_{error}")
        logger.info("Slack message sent via bot token")
        return result

    def _send_webhook(self, text: str, blocks: Optional[List[Dict[str, Any]]]) -> DeliveryResult:
        payload: Dict[str, Any] = {"text": text}
        if blocks:
            payload["blocks"] = blocks
        try:
            response = delivery.post(
                self.settings.slack_webhook_url,
                self.settings.webhook_timeout_seconds,
                json=payload,
            )
        except requests.RequestException as e:
            logger.error("Slack webhook POST failed (%s)", type(e).__name__)
            return DeliveryResult.failed(reason="request_error")

        result = delivery.result_from_status(response.status_code)
        logger.info("Slack webhook message: %s", result.status.value)
        return result
