"""
API tests for the JWT-protected admin panel.
"""

from unittest.mock import patch

from rapidroi.app.config import get_settings
from rapidroi.app.main import app
from rapidroi.app.services.session_store import get_session_store

from rapidroi.tests.test_helpers import admin_headers, fake_response


def test_integrations_requires_token(client):
    response = client.get("/v1/admin/integrations")

    assert response.status_code in (401, 403)


def test_integrations_rejects_bad_token(client):
    response = client.get(
        "/v1/admin/integrations", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_token"


def test_integrations_rejects_unknown_role(client):
    response = client.get("/v1/admin/integrations", headers=admin_headers(role="intern"))

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_role"


def test_integrations_status_unconfigured(client):
    body = client.get("/v1/admin/integrations", headers=admin_headers(role="viewer")).json()

    assert body["spreadsheet"]["configured"] is False
    assert body["slack"] == {"configured": False, "mode": None}
    assert body["email"]["configured"] is False


def test_integrations_status_never_leaks_secrets(client, configured_settings):
    app.dependency_overrides[get_settings] = lambda: configured_settings
    response = client.get("/v1/admin/integrations", headers=admin_headers())

    body = response.json()
    assert body["slack"]["mode"] == "webhook"
    assert body["spreadsheet"]["token_configured"] is True
    assert "sheet-token" not in response.text
    assert "script.example.com" not in response.text
    assert "mail-token" not in response.text


def test_test_spreadsheet_unconfigured(client):
    response = client.post("/v1/admin/test/spreadsheet", headers=admin_headers())

    assert response.status_code == 200
    assert response.json() == {"ok": False, "status": "failed", "reason": "missing_webhook_url"}


def test_test_slack_sent(client, configured_settings):
    app.dependency_overrides[get_settings] = lambda: configured_settings
    with patch("rapidroi.app.services.delivery.requests.post", return_value=fake_response(200)) as mock_post:
        response = client.post(
            "/v1/admin/test/slack", json={"message": "ping"}, headers=admin_headers()
        )

    assert response.json()["status"] == "sent"
    assert mock_post.call_args[1]["json"]["text"] == "ping"


def test_viewer_cannot_send_tests(client):
    response = client.post("/v1/admin/test/slack", headers=admin_headers(role="viewer"))

    assert response.status_code == 403
    assert response.json()["error"] == "insufficient_permissions"


def test_clear_sessions(client):
    store = get_session_store()
    store.sign_in("a", "a@clinic.org")
    store.sign_in("b", "b@clinic.org")

    response = client.delete("/v1/admin/sessions", headers=admin_headers())

    assert response.json() == {"cleared": 2}
    assert len(store) == 0
