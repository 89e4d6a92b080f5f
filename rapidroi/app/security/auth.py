"""
JWT-based authentication for the RapidROI admin panel.

The public calculator endpoints are unauthenticated. Only the admin/debug
routes (integration status, test sends, session reset) require a bearer JWT.

Roles:
- viewer: Can read integration status
- admin: Full access, including test sends and clearing sessions
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from rapidroi.app.config import Settings, get_settings


VALID_ROLES = {"viewer", "admin"}

# Security scheme
security = HTTPBearer()


class Identity(BaseModel):
    """Authenticated operator extracted from a validated JWT."""

    sub: str  # Operator ID (subject)
    role: str
    exp: Optional[int] = None

    def has_role(self, required_role: str) -> bool:
        """Check if identity has the required role (admin implies all)."""
        return self.role == required_role or self.role == "admin"


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a JWT.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or malformed
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "require_exp": True,
                "require_sub": True,
            },
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "invalid_token",
                "message": "Token validation failed",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Extract and validate identity from the Authorization header.

    Raises:
        HTTPException: 401 if the token is invalid or missing required claims
    """
    payload = decode_jwt(credentials.credentials, settings)

    sub = payload.get("sub")
    role = payload.get("role")

    if not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "missing_claim",
                "message": "Token missing 'role' claim",
            },
        )

    if role not in VALID_ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "invalid_role",
                "message": f"Invalid role '{role}'. Must be one of: {sorted(VALID_ROLES)}",
            },
        )

    return Identity(sub=sub, role=role, exp=payload.get("exp"))


def require_role(required_role: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/test/slack")
        async def test_slack(identity: Identity = Depends(require_role("admin"))):
            ...
    """

    async def role_checker(
        identity: Identity = Depends(get_current_identity),
    ) -> Identity:
        if not identity.has_role(required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "insufficient_permissions",
                    "message": f"Role '{required_role}' required. You have: '{identity.role}'",
                },
            )
        return identity

    return role_checker


def create_jwt_token(
    sub: str,
    role: str,
    settings: Optional[Settings] = None,
    expires_in_seconds: int = 3600,
) -> str:
    """
    Create a JWT for development and tests.

    In production, operator tokens come from the identity provider.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)

    payload = {
        "sub": sub,
        "role": role,
        "exp": int(now.timestamp()) + expires_in_seconds,
        "iat": int(now.timestamp()),
    }

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
