"""
RapidROI Gateway - FastAPI Application

HTTP service behind the RapidClaims ROI calculator: formula evaluation,
metrics derivation, the email sign-in gate, PDF reports and lead forwarding
to the spreadsheet webhook and Slack.

Hardening:
- Rate limiting on public write endpoints (disabled in test mode)
- Custom exception handling so request bodies (emails) never echo back
- Admin routes require a JWT
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from rapidroi.app.config import get_settings
from rapidroi.app.routes import admin, calculator, health, leads, reports, session
from rapidroi.app.security.rate_limit import limiter


logger = logging.getLogger(__name__)

SERVICE_NAME = "RapidROI Gateway"
SERVICE_VERSION = "0.1.0"


def sanitize_error_detail(detail: object) -> dict:
    """
    Keep structured error details, replace anything else with a generic message.

    Our own HTTPExceptions always carry {"error", "message"} dicts; string
    details from elsewhere may contain request data.
    """
    if isinstance(detail, dict):
        return detail

    return {
        "error": "internal_error",
        "message": "An error occurred processing your request"
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    On startup, log which integrations are configured (never their values).
    Missing integrations are not an error.
    """
    settings = get_settings()
    logger.info(
        "%s starting: spreadsheet=%s slack=%s email=%s",
        SERVICE_NAME,
        settings.spreadsheet_configured,
        settings.slack_configured,
        settings.email_configured,
    )
    if settings.jwt_secret_key == "dev-secret-key-change-in-production":
        logger.warning("JWT_SECRET_KEY not set; admin tokens use the development secret")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="ROI calculator, sign-in gate, PDF reports and lead capture for RapidClaims",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    debug=False
)

# Register rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with structured details only."""
    return JSONResponse(
        status_code=exc.status_code,
        content=sanitize_error_detail(exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors without echoing the request body.

    Pydantic errors can include input values (email addresses), so only
    field paths, error types and messages are returned.
    """
    errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "type": error["type"],
            "message": error["msg"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": errors
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the exception type only and return a generic 500."""
    logger.error("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred"
        }
    )


# Register routers
app.include_router(health.router)
app.include_router(calculator.router)
app.include_router(session.router)
app.include_router(leads.router)
app.include_router(reports.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "operational"
    }
