"""
Input validation helpers.
"""

import re

from rapidroi.app.models.leads import EMAIL_PATTERN


_EMAIL_RE = re.compile(EMAIL_PATTERN)


def is_valid_email(email: str) -> bool:
    """Loose address check: something@something.tld, no whitespace."""
    if not email:
        return False
    return _EMAIL_RE.match(email.strip()) is not None
