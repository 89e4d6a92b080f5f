"""
Admin/debug endpoints for operating the lead integrations.

SECURITY: Requires JWT authentication. Integration status never includes
URLs or tokens, only whether each integration is configured.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from rapidroi.app.config import Settings, get_settings
from rapidroi.app.models.leads import DeliveryResult, LeadSource
from rapidroi.app.security.auth import Identity, require_role
from rapidroi.app.services.session_store import SessionStore, get_session_store
from rapidroi.app.services.slack import SlackNotifier, build_email_capture_blocks
from rapidroi.app.services.spreadsheet import (
    SpreadsheetClient,
    build_email_data,
    local_time_now,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])

TEST_EMAIL = "test@example.com"


class IntegrationTestRequest(BaseModel):
    email: str = Field(default=TEST_EMAIL, max_length=320)
    message: Optional[str] = Field(default=None, max_length=2000)


@router.get("/integrations")
async def integration_status(
    identity: Identity = Depends(require_role("viewer")),
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
):
    """Which integrations are configured, and how many sessions are active."""
    if settings.slack_bot_configured:
        slack_mode = "bot"
    elif settings.slack_webhook_url:
        slack_mode = "webhook"
    else:
        slack_mode = None

    return {
        "spreadsheet": {
            "configured": settings.spreadsheet_configured,
            "token_configured": bool(settings.spreadsheet_webhook_token),
        },
        "slack": {"configured": settings.slack_configured, "mode": slack_mode},
        "email": {"configured": settings.email_configured},
        "webhook_timeout_seconds": settings.webhook_timeout_seconds,
        "active_sessions": len(store),
    }


# Plain def: test sends block on the webhook and run in the threadpool
@router.post("/test/spreadsheet", response_model=DeliveryResult)
def send_test_row(
    body: Optional[IntegrationTestRequest] = None,
    identity: Identity = Depends(require_role("admin")),
    settings: Settings = Depends(get_settings),
) -> DeliveryResult:
    """Send a test lead row and report the delivery outcome."""
    body = body or IntegrationTestRequest()
    data = build_email_data(
        body.email,
        LeadSource.OTHER,
        subject="Test Email Capture",
        body=body.message or "Test row sent from the admin panel",
    )
    result = SpreadsheetClient(settings).append(data)
    logger.info("Admin %s ran spreadsheet test: %s", identity.sub, result.status.value)
    return result


@router.post("/test/slack", response_model=DeliveryResult)
def send_test_slack_message(
    body: Optional[IntegrationTestRequest] = None,
    identity: Identity = Depends(require_role("admin")),
    settings: Settings = Depends(get_settings),
) -> DeliveryResult:
    """Send a test Slack message and report the delivery outcome."""
    body = body or IntegrationTestRequest()
    text = body.message or "RapidROI Slack integration test"
    blocks = build_email_capture_blocks(body.email, LeadSource.OTHER, local_time_now())
    result = SlackNotifier(settings).send(text, blocks)
    logger.info("Admin %s ran Slack test: %s", identity.sub, result.status.value)
    return result


@router.delete("/sessions")
async def clear_sessions(
    identity: Identity = Depends(require_role("admin")),
    store: SessionStore = Depends(get_session_store),
):
    """Sign every session out."""
    cleared = store.clear()
    logger.info("Admin %s cleared %d sessions", identity.sub, cleared)
    return {"cleared": cleared}
