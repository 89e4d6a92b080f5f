"""
Pytest configuration for RapidROI tests.

The environment variables are set at module level (not in pytest_configure)
because they need to be available before any modules are imported during
pytest's collection phase.
"""

import os

# Set ENV=TEST to disable rate limiting BEFORE any modules are imported
os.environ["ENV"] = "TEST"
os.environ["DISABLE_RATE_LIMITS"] = "1"

import uuid

import pytest
from fastapi.testclient import TestClient

from rapidroi.app.config import Settings, get_settings
from rapidroi.app.main import app
from rapidroi.app.services.session_store import get_session_store


@pytest.fixture(autouse=True)
def reset_state():
    """Each test starts with no sessions and no dependency overrides."""
    get_session_store().clear()
    yield
    get_session_store().clear()
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    """Unconfigured integrations: every outbound call reports a missing config."""
    return Settings()


@pytest.fixture
def configured_settings():
    """All integrations configured (outbound HTTP must be patched in tests)."""
    return Settings(
        spreadsheet_webhook_url="https://script.example.com/macros/s/abc/exec",
        spreadsheet_webhook_token="sheet-token",
        slack_webhook_url="https://hooks.slack.example.com/services/T000/B000/XXX",
        email_webhook_url="https://mail.example.com/hooks/send",
        email_webhook_token="mail-token",
        webhook_timeout_seconds=5,
    )


@pytest.fixture
def client(settings):
    """Test client with integration settings overridden."""
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


@pytest.fixture
def session_headers():
    return {"X-Session-ID": f"test-session-{uuid.uuid4()}"}


@pytest.fixture
def signed_in_headers(session_headers):
    """Headers for a session that has already passed the sign-in gate."""
    get_session_store().sign_in(session_headers["X-Session-ID"], "reader@hospital.org")
    return session_headers
