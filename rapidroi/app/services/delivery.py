"""
Shared helper for outbound webhook calls.

Every call maps to a DeliveryResult; transport errors are surfaced to the
caller as requests.RequestException so it can try another encoding.
"""

import logging
from typing import Any, Dict, Optional

import requests

from rapidroi.app.models.leads import DeliveryResult


logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=UTF-8"


def result_from_status(status_code: int) -> DeliveryResult:
    """
    Map an HTTP status code to a delivery result.

    Redirects are not followed (Apps Script answers with a 302 to the
    script output), so a 3xx means "accepted, outcome unknown".
    """
    if 200 <= status_code < 300:
        return DeliveryResult.sent()
    if 300 <= status_code < 400:
        return DeliveryResult.unknown(reason=f"http_{status_code}")
    return DeliveryResult.failed(reason=f"http_{status_code}")


def post(
    url: str,
    timeout: float,
    *,
    json: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """POST without following redirects. Raises requests.RequestException."""
    request_headers = dict(headers or {})
    if data is not None:
        request_headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
    return requests.post(
        url,
        json=json,
        data=data,
        headers=request_headers,
        timeout=timeout,
        allow_redirects=False,
    )


def email_domain(email: str) -> str:
    """Domain part of an address, for log lines."""
    return email.rsplit("@", 1)[-1] if "@" in email else "<invalid>"
