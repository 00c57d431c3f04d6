"""Access token verification.

Tokens are issued by the identity service; this module only validates them
and turns their claims into a Principal.
"""

from typing import Any

from jose import JWTError, jwt

from anonboard.auth.permissions import parse_role
from anonboard.auth.schemas import Principal
from anonboard.config.settings import get_settings


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates the JWT signature and, when present, the expiration time.

    Raises:
        JWTError: If token is invalid or expired
    """
    settings = get_settings()

    return jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )


def principal_from_payload(payload: dict[str, Any]) -> Principal:
    """Build a Principal from token claims.

    The subject is read from ``sub``, falling back to ``userId`` for tokens
    minted by the legacy identity service.

    Raises:
        JWTError: If the token carries no subject
    """
    subject = payload.get("sub") or payload.get("userId")
    if not subject:
        msg = "Token has no subject"
        raise JWTError(msg)

    return Principal(id=str(subject), role=parse_role(payload.get("role")).value)
