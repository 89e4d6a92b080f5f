"""
API tests for PDF, emailed report, JSON export and share text.
"""

import base64
import inspect
from typing import Dict
from unittest.mock import patch

import pytest

from rapidroi.app.config import get_settings
from rapidroi.app.main import app
from rapidroi.app.models.metrics import ROIMetrics
from rapidroi.app.services.report_pdf import generate_report_pdf, impact_split, report_filename
from rapidroi.app.services.roi import calculate_roi

from rapidroi.tests.test_helpers import fake_response


POST = "rapidroi.app.services.delivery.requests.post"


# ============================================================================
# PDF rendering
# ============================================================================

def test_generate_report_pdf_bytes():
    metrics = ROIMetrics()
    pdf = generate_report_pdf(metrics, calculate_roi(metrics), company_name="Mercy <Health>")

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 2000


def test_generate_report_pdf_with_zero_impact():
    metrics = ROIMetrics(
        number_of_billers=0, number_of_physicians=0, number_of_encoder_licenses=0,
        claims_per_annum=0, charts_processed_per_annum=0, rvus_coded_per_annum=0,
    )
    result = calculate_roi(metrics)

    assert impact_split(result) == (0, 0, 0)
    assert generate_report_pdf(metrics, result).startswith(b"%PDF")


def test_report_filenames():
    assert report_filename().startswith("rapidroi-analysis-")
    assert report_filename(prefix="ROI-Report").startswith("ROI-Report-")
    assert report_filename().endswith(".pdf")


def test_impact_split_for_defaults():
    cost, revenue, risk = impact_split(calculate_roi(ROIMetrics()))

    assert (cost, revenue, risk) == (95, 3, 2)


# ============================================================================
# Download
# ============================================================================

def test_pdf_requires_sign_in(client, session_headers):
    response = client.post("/v1/reports/pdf", json={}, headers=session_headers)

    assert response.status_code == 403
    assert response.json()["error"] == "sign_in_required"


def test_pdf_download(client, signed_in_headers):
    response = client.post(
        "/v1/reports/pdf", json={"company_name": "Mercy Health"}, headers=signed_in_headers
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "rapidroi-analysis-" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_pdf_generation_failure(client, signed_in_headers):
    with patch(
        "rapidroi.app.routes.reports.generate_report_pdf",
        side_effect=RuntimeError("boom"),
    ):
        response = client.post("/v1/reports/pdf", json={}, headers=signed_in_headers)

    assert response.status_code == 500
    assert response.json()["error"] == "pdf_generation_failed"


# ============================================================================
# Emailed report
# ============================================================================

def test_email_report_without_webhook_returns_inline_pdf(client):
    response = client.post("/v1/reports/email", json={"email": "cfo@clinic.org"})

    assert response.status_code == 200
    body = response.json()
    assert body["delivery"]["reason"] == "missing_webhook_url"
    assert body["filename"].startswith("ROI-Report-")
    assert base64.b64decode(body["pdf_base64"]).startswith(b"%PDF")
    assert body["lead"]["source"] == "PDF Request"


def test_email_report_sent(client, configured_settings):
    app.dependency_overrides[get_settings] = lambda: configured_settings
    with patch(POST, return_value=fake_response(200)) as mock_post:
        response = client.post("/v1/reports/email", json={"email": "cfo@clinic.org"})

    body = response.json()
    assert body["delivery"]["status"] == "sent"
    assert body["pdf_base64"] is None
    # spreadsheet, Slack, then the email webhook
    assert mock_post.call_count == 3
    email_body = mock_post.call_args_list[-1][1]["json"]
    assert email_body["to"] == "cfo@clinic.org"
    assert email_body["attachments"][0]["filename"] == body["filename"]


def test_email_report_invalid_email(client):
    response = client.post("/v1/reports/email", json={"email": "cfo"})

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_email"


# ============================================================================
# Export and share text
# ============================================================================

def test_export_requires_sign_in(client, session_headers):
    assert client.post("/v1/reports/export", json={}, headers=session_headers).status_code == 403


def test_export_document(client, signed_in_headers):
    response = client.post("/v1/reports/export", json={}, headers=signed_in_headers)

    assert response.status_code == 200
    assert "roi-calculator-report-" in response.headers["content-disposition"]
    body = response.json()
    assert set(body) == {"timestamp", "metrics", "levers", "calculations"}
    assert body["levers"]["rvu_increase_em"] == "medium"
    assert body["calculations"]["summary"]["roi"] == 400


def test_share_text(client, signed_in_headers):
    body = client.post("/v1/reports/share-text", json={}, headers=signed_in_headers).json()

    assert "Total Annual Impact: $3,575,278" in body["text"]
    assert "ROI: 400.0%" in body["text"]


def test_share_text_declares_response_model():
    route = next(r for r in app.routes if getattr(r, "path", None) == "/v1/reports/share-text")

    assert route.response_model == Dict[str, str]


# ============================================================================
# Blocking handlers
# ============================================================================

@pytest.mark.parametrize(
    "path",
    [
        "/v1/reports/pdf",
        "/v1/reports/email",
        "/v1/admin/test/spreadsheet",
        "/v1/admin/test/slack",
    ],
)
def test_webhook_and_pdf_handlers_are_sync(path):
    """Handlers doing blocking HTTP or PDF work run in the threadpool, not the event loop."""
    route = next(r for r in app.routes if getattr(r, "path", None) == path)

    assert not inspect.iscoroutinefunction(route.endpoint)
