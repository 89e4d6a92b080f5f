"""
API tests for the sign-in gate and lead capture.
"""

from unittest.mock import patch

from rapidroi.app.main import app
from rapidroi.app.models.leads import LeadSource
from rapidroi.app.services.session_store import SessionStore, get_session_store


CAPTURE = "rapidroi.app.services.lead_capture.LeadCaptureService.capture"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_sign_in_success(client, session_headers):
    with patch(CAPTURE) as mock_capture:
        response = client.post(
            "/v1/session/sign-in",
            json={"email": "  doc@clinic.org "},
            headers=session_headers,
        )

    assert response.status_code == 200
    body = response.json()
    assert body["signed_in"] is True
    assert body["email"] == "doc@clinic.org"
    assert body["session_id"] == session_headers["X-Session-ID"]

    mock_capture.assert_called_once()
    args, _ = mock_capture.call_args
    assert args == ("doc@clinic.org", LeadSource.SIGN_IN)


def test_sign_in_unlocks_calculation(client, session_headers):
    with patch(CAPTURE):
        client.post("/v1/session/sign-in", json={"email": "doc@clinic.org"}, headers=session_headers)

    body = client.post("/v1/roi/calculate", json={}, headers=session_headers).json()
    assert body["locked"] is False


def test_sign_in_invalid_email(client, session_headers):
    with patch(CAPTURE) as mock_capture:
        response = client.post(
            "/v1/session/sign-in", json={"email": "not-an-email"}, headers=session_headers
        )

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_email"
    assert not get_session_store().is_signed_in(session_headers["X-Session-ID"])
    mock_capture.assert_not_called()


def test_sign_in_requires_session_header(client):
    response = client.post("/v1/session/sign-in", json={"email": "doc@clinic.org"})

    assert response.status_code == 400
    assert response.json()["error"] == "missing_session_id"


def test_sign_in_with_unconfigured_integrations_still_succeeds(client, session_headers):
    """Forwarding failures never affect sign-in."""
    response = client.post(
        "/v1/session/sign-in", json={"email": "doc@clinic.org"}, headers=session_headers
    )

    assert response.status_code == 200
    assert response.json()["signed_in"] is True


def test_get_session_and_sign_out(client, signed_in_headers):
    assert client.get("/v1/session", headers=signed_in_headers).json()["signed_in"] is True

    response = client.post("/v1/session/sign-out", headers=signed_in_headers)
    assert response.json()["signed_in"] is False
    assert client.get("/v1/session", headers=signed_in_headers).json()["signed_in"] is False


def test_unknown_session_is_signed_out(client, session_headers):
    body = client.get("/v1/session", headers=session_headers).json()

    assert body == {
        "session_id": session_headers["X-Session-ID"],
        "signed_in": False,
        "email": None,
        "signed_in_at": None,
    }


def test_overlong_session_id_rejected(client):
    response = client.get("/v1/session", headers={"X-Session-ID": "x" * 500})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_session_id"


def test_lead_capture_accepted(client):
    with patch(CAPTURE) as mock_capture:
        response = client.post(
            "/v1/leads/capture", json={"email": "lead@clinic.org", "source": "PDF Request"}
        )

    assert response.status_code == 202
    assert response.json() == {"accepted": True, "email": "lead@clinic.org", "source": "PDF Request"}
    args, kwargs = mock_capture.call_args
    assert args == ("lead@clinic.org", LeadSource.PDF_REQUEST)
    assert kwargs["subject"] is None


def test_lead_capture_invalid_email(client):
    response = client.post("/v1/leads/capture", json={"email": "nope"})

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_email"


def test_lead_capture_unknown_source(client):
    response = client.post("/v1/leads/capture", json={"email": "lead@clinic.org", "source": "Fax"})

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


# ============================================================================
# Session expiry and eviction
# ============================================================================

def test_expired_session_reads_as_signed_out():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    store.sign_in("s1", "a@clinic.org")

    clock.now += 59
    assert store.is_signed_in("s1")

    clock.now += 1
    assert not store.is_signed_in("s1")
    assert len(store) == 0


def test_sign_in_refreshes_expiry():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    store.sign_in("s1", "a@clinic.org")

    clock.now += 50
    store.sign_in("s1", "a@clinic.org")
    clock.now += 50

    assert store.is_signed_in("s1")


def test_store_evicts_oldest_when_full():
    store = SessionStore(max_sessions=2, clock=FakeClock())
    store.sign_in("s1", "a@clinic.org")
    store.sign_in("s2", "b@clinic.org")
    store.sign_in("s3", "c@clinic.org")

    assert len(store) == 2
    assert not store.is_signed_in("s1")
    assert store.is_signed_in("s2")
    assert store.is_signed_in("s3")


def test_expired_session_locks_calculation(client, session_headers):
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    app.dependency_overrides[get_session_store] = lambda: store
    store.sign_in(session_headers["X-Session-ID"], "reader@hospital.org")

    body = client.post("/v1/roi/calculate", json={}, headers=session_headers).json()
    assert body["locked"] is False

    clock.now += 61
    body = client.post("/v1/roi/calculate", json={}, headers=session_headers).json()
    assert body["locked"] is True
