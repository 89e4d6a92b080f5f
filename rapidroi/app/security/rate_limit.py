"""
Shared slowapi rate limiter.

Set ENV=TEST or DISABLE_RATE_LIMITS=1 to disable rate limiting.
"""

import uuid

from slowapi import Limiter
from slowapi.util import get_remote_address

from rapidroi.app.config import rate_limits_disabled


def get_limiter() -> Limiter:
    """Create the rate limiter, disabled in test mode."""
    if rate_limits_disabled():
        return Limiter(key_func=lambda: str(uuid.uuid4()), enabled=False)
    return Limiter(key_func=get_remote_address)


limiter = get_limiter()
