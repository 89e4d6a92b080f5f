"""
Tests for outbound integrations: spreadsheet webhook, Slack and the email
webhook. requests.post is patched; nothing leaves the process.
"""

import json
from unittest.mock import patch

import pytest
import requests

from rapidroi.app.config import Settings
from rapidroi.app.models.leads import (
    DeliveryStatus,
    EmailAttachment,
    EmailPayload,
    LeadSource,
)
from rapidroi.app.services.email_sender import EmailReportSender
from rapidroi.app.services.lead_capture import LeadCaptureService
from rapidroi.app.services.slack import (
    SLACK_POST_MESSAGE_URL,
    SlackNotifier,
    build_email_capture_blocks,
    build_sign_in_blocks,
)
from rapidroi.app.services.spreadsheet import SpreadsheetClient, build_email_data

from rapidroi.tests.test_helpers import fake_response


POST = "rapidroi.app.services.delivery.requests.post"


@pytest.fixture
def lead():
    return build_email_data("lead@clinic.org", LeadSource.ROI_CALCULATOR)


@pytest.fixture
def bot_settings():
    return Settings(slack_bot_token="xoxb-test", slack_channel="#leads")


# ============================================================================
# Lead record
# ============================================================================

def test_build_email_data_defaults():
    data = build_email_data("lead@clinic.org", LeadSource.SIGN_IN)

    assert data.sender == "lead@clinic.org"
    assert data.subject == "Sign In - Email Capture"
    assert data.body.startswith("Email captured from Sign In at ")
    assert data.source == LeadSource.SIGN_IN
    assert data.timestamp.endswith("Z")


def test_build_email_data_custom_subject_and_body():
    data = build_email_data("lead@clinic.org", LeadSource.OTHER, subject="Hi", body="Note")

    assert data.subject == "Hi"
    assert data.body == "Note"


# ============================================================================
# Spreadsheet
# ============================================================================

def test_spreadsheet_missing_url_does_not_raise(lead):
    with patch(POST) as mock_post:
        result = SpreadsheetClient(Settings()).append(lead)

    assert result.ok is False
    assert result.status == DeliveryStatus.FAILED
    assert result.reason == "missing_webhook_url"
    mock_post.assert_not_called()


def test_spreadsheet_form_encoded_first(lead, configured_settings):
    with patch(POST, return_value=fake_response(200)) as mock_post:
        result = SpreadsheetClient(configured_settings).append(lead, user_agent="pytest-agent")

    assert result.status == DeliveryStatus.SENT
    assert mock_post.call_count == 1
    _, kwargs = mock_post.call_args
    form = kwargs["data"]
    assert form["sender"] == "lead@clinic.org"
    assert form["email"] == "lead@clinic.org"
    assert form["source"] == "ROI Calculator"
    assert form["token"] == "sheet-token"
    assert form["userAgent"] == "pytest-agent"
    assert form["triggered_from"] == "rapidroi-gateway"
    assert kwargs["json"] is None
    assert kwargs["allow_redirects"] is False
    assert kwargs["timeout"] == 5
    assert kwargs["headers"]["Content-Type"].startswith("application/x-www-form-urlencoded")


def test_spreadsheet_redirect_is_unknown(lead, configured_settings):
    with patch(POST, return_value=fake_response(302)):
        result = SpreadsheetClient(configured_settings).append(lead)

    assert result.ok is True
    assert result.status == DeliveryStatus.UNKNOWN


def test_spreadsheet_http_error_is_failed(lead, configured_settings):
    with patch(POST, return_value=fake_response(500)):
        result = SpreadsheetClient(configured_settings).append(lead)

    assert result.ok is False
    assert result.reason == "http_500"


def test_spreadsheet_falls_back_to_json(lead, configured_settings):
    responses = [requests.ConnectionError("refused"), fake_response(200)]
    with patch(POST, side_effect=responses) as mock_post:
        result = SpreadsheetClient(configured_settings).append(lead)

    assert result.status == DeliveryStatus.SENT
    assert mock_post.call_count == 2
    _, kwargs = mock_post.call_args
    assert kwargs["json"]["sender"] == "lead@clinic.org"
    assert kwargs["json"]["token"] == "sheet-token"
    assert "email" not in kwargs["json"]


def test_spreadsheet_all_strategies_failed(lead, configured_settings):
    with patch(POST, side_effect=requests.Timeout("slow")):
        result = SpreadsheetClient(configured_settings).append(lead)

    assert result.ok is False
    assert result.reason == "all_strategies_failed"


def test_spreadsheet_payload_without_token(lead):
    settings = Settings(spreadsheet_webhook_url="https://sheet.example.com/hook")
    payload = SpreadsheetClient(settings).build_payload(lead)

    assert "token" not in payload
    assert set(payload) == {
        "sender", "subject", "date", "body", "source", "timestamp",
        "triggered_from", "userAgent",
    }


# ============================================================================
# Slack
# ============================================================================

def test_slack_missing_config():
    with patch(POST) as mock_post:
        result = SlackNotifier(Settings()).send("hello")

    assert result.ok is False
    assert result.reason == "missing_slack_config"
    mock_post.assert_not_called()


def test_slack_webhook_mode(configured_settings):
    blocks = build_sign_in_blocks("lead@clinic.org", "01/31/2025, 10:00:00 AM")
    with patch(POST, return_value=fake_response(200)) as mock_post:
        result = SlackNotifier(configured_settings).send("User signed in", blocks)

    assert result.status == DeliveryStatus.SENT
    args, kwargs = mock_post.call_args
    assert args[0] == configured_settings.slack_webhook_url
    assert kwargs["json"] == {"text": "User signed in", "blocks": blocks}


def test_slack_webhook_without_blocks(configured_settings):
    with patch(POST, return_value=fake_response(200)) as mock_post:
        SlackNotifier(configured_settings).send("plain")

    assert mock_post.call_args[1]["json"] == {"text": "plain"}


def test_slack_bot_mode(bot_settings):
    with patch(POST, return_value=fake_response(200, {"ok": True})) as mock_post:
        result = SlackNotifier(bot_settings).send("hello")

    assert result.status == DeliveryStatus.SENT
    args, kwargs = mock_post.call_args
    assert args[0] == SLACK_POST_MESSAGE_URL
    assert kwargs["headers"]["Authorization"] == "Bearer xoxb-test"
    assert kwargs["json"] == {"channel": "#leads", "text": "hello"}


def test_slack_bot_mode_preferred_over_webhook(bot_settings):
    settings = bot_settings.model_copy(
        update={"slack_webhook_url": "https://hooks.slack.example.com/x"}
    )
    with patch(POST, return_value=fake_response(200, {"ok": True})) as mock_post:
        SlackNotifier(settings).send("hello")

    assert mock_post.call_args[0][0] == SLACK_POST_MESSAGE_URL


def test_slack_bot_api_error(bot_settings):
    body = {"ok": False, "error": "channel_not_found"}
    with patch(POST, return_value=fake_response(200, body)):
        result = SlackNotifier(bot_settings).send("hello")

    assert result.ok is False
    assert result.reason == "slack_channel_not_found"


def test_slack_transport_error(bot_settings):
    with patch(POST, side_effect=requests.ConnectionError("down")):
        result = SlackNotifier(bot_settings).send("hello")

    assert result.ok is False
    assert result.reason == "request_error"


def test_email_capture_blocks():
    blocks = build_email_capture_blocks("lead@clinic.org", LeadSource.PDF_REQUEST, "now")

    assert blocks[0]["text"]["text"] == ":incoming_envelope: *Email Captured*"
    fields = [field["text"] for field in blocks[1]["fields"]]
    assert fields == ["*Email:*\nlead@clinic.org", "*Source:*\nPDF Request", "*Time:*\nnow"]


# ============================================================================
# Email webhook
# ============================================================================

@pytest.fixture
def email_payload():
    return EmailPayload(
        to="lead@clinic.org",
        subject="Your report",
        text="Attached",
        attachments=[EmailAttachment(filename="ROI-Report-2025-01-31.pdf", content_base64="JVBERi0=")],
    )


def test_email_missing_url(email_payload):
    result = EmailReportSender(Settings()).send(email_payload)

    assert result.ok is False
    assert result.reason == "missing_webhook_url"


def test_email_sent_as_json(email_payload, configured_settings):
    with patch(POST, return_value=fake_response(202)) as mock_post:
        result = EmailReportSender(configured_settings).send(email_payload)

    assert result.status == DeliveryStatus.SENT
    body = mock_post.call_args[1]["json"]
    assert body["to"] == "lead@clinic.org"
    assert body["token"] == "mail-token"
    assert body["attachments"][0]["content_type"] == "application/pdf"
    assert "html" not in body


def test_email_falls_back_to_form(email_payload, configured_settings):
    responses = [requests.ConnectionError("refused"), fake_response(200)]
    with patch(POST, side_effect=responses) as mock_post:
        result = EmailReportSender(configured_settings).send(email_payload)

    assert result.status == DeliveryStatus.SENT
    form = mock_post.call_args[1]["data"]
    assert form["to"] == "lead@clinic.org"
    assert json.loads(form["attachments"])[0]["filename"] == "ROI-Report-2025-01-31.pdf"


def test_email_http_error(email_payload, configured_settings):
    with patch(POST, return_value=fake_response(401)):
        result = EmailReportSender(configured_settings).send(email_payload)

    assert result.reason == "http_401"


# ============================================================================
# Lead capture
# ============================================================================

def test_lead_capture_unconfigured_reports_both_failures():
    result = LeadCaptureService(Settings()).capture("lead@clinic.org", LeadSource.SIGN_IN)

    assert result.spreadsheet.reason == "missing_webhook_url"
    assert result.slack.reason == "missing_slack_config"


def test_lead_capture_sign_in_uses_sign_in_blocks(configured_settings):
    with patch(POST, return_value=fake_response(200)) as mock_post:
        result = LeadCaptureService(configured_settings).capture(
            "lead@clinic.org", LeadSource.SIGN_IN
        )

    assert result.spreadsheet.ok and result.slack.ok
    slack_body = mock_post.call_args_list[-1][1]["json"]
    assert slack_body["blocks"][0]["text"]["text"] == ":white_check_mark: *User Signed In*"


def test_lead_capture_slack_failure_does_not_block_spreadsheet(configured_settings):
    responses = [fake_response(200), requests.ConnectionError("slack down")]
    with patch(POST, side_effect=responses):
        result = LeadCaptureService(configured_settings).capture("lead@clinic.org")

    assert result.spreadsheet.status == DeliveryStatus.SENT
    assert result.slack.status == DeliveryStatus.FAILED
