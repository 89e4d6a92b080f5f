"""
Sign-in gate endpoints.

The calculator is usable anonymously; the Executive Summary and the PDF
download unlock once the session submits a valid email. Sessions are
identified by the X-Session-ID header chosen by the client.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request, status

from rapidroi.app.config import Settings, get_settings
from rapidroi.app.models.leads import EmailRequest, LeadSource, SessionState
from rapidroi.app.security.rate_limit import limiter
from rapidroi.app.services.delivery import email_domain
from rapidroi.app.services.lead_capture import LeadCaptureService
from rapidroi.app.services.session_store import SessionStore, get_session_store
from rapidroi.app.services.validation import is_valid_email


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/session", tags=["session"])

MAX_SESSION_ID_LENGTH = 128


def get_session_id(
    x_session_id: Optional[str] = Header(default=None, alias="X-Session-ID"),
) -> Optional[str]:
    """Session id from the X-Session-ID header, or None when absent/blank."""
    if x_session_id is None:
        return None
    x_session_id = x_session_id.strip()
    if not x_session_id:
        return None
    if len(x_session_id) > MAX_SESSION_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_session_id",
                "message": f"X-Session-ID must be at most {MAX_SESSION_ID_LENGTH} characters",
            },
        )
    return x_session_id


def require_session_id(session_id: Optional[str] = Depends(get_session_id)) -> str:
    if session_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "missing_session_id",
                "message": "X-Session-ID header is required",
            },
        )
    return session_id


def is_signed_in(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> bool:
    return session_id is not None and store.is_signed_in(session_id)


def require_signed_in(signed_in: bool = Depends(is_signed_in)) -> None:
    """Dependency guarding gated endpoints."""
    if not signed_in:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "sign_in_required",
                "message": "Sign in with your email to unlock detailed results",
            },
        )


def invalid_email_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error": "invalid_email",
            "message": "Please enter a valid email address",
        },
    )


@router.post("/sign-in", response_model=SessionState)
@limiter.limit("20/minute")
async def sign_in(
    request: Request,  # Required for rate limiting
    body: EmailRequest,
    background_tasks: BackgroundTasks,
    session_id: str = Depends(require_session_id),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> SessionState:
    """
    Sign the session in with an email address.

    On success the lead is forwarded to the spreadsheet webhook and Slack
    after the response is sent; forwarding failures never affect sign-in.

    Errors:
    - 400 missing_session_id: no X-Session-ID header
    - 422 invalid_email: address does not look like name@domain.tld
    """
    if not is_valid_email(body.email):
        raise invalid_email_error()

    state = store.sign_in(session_id, body.email)
    logger.info("Session signed in (domain %s)", email_domain(body.email))

    background_tasks.add_task(
        LeadCaptureService(settings).capture,
        body.email,
        LeadSource.SIGN_IN,
        user_agent=request.headers.get("user-agent"),
    )
    return state


@router.get("", response_model=SessionState)
async def get_session(
    session_id: str = Depends(require_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionState:
    """Current sign-in state of the session."""
    return store.get(session_id)


@router.post("/sign-out", response_model=SessionState)
async def sign_out(
    session_id: str = Depends(require_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionState:
    return store.sign_out(session_id)
