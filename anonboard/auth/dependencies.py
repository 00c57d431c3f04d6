"""FastAPI dependencies for authentication.

Provides:
- Bearer token extraction
- Current principal extraction from the JWT
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from anonboard.auth.schemas import Principal
from anonboard.auth.security import decode_access_token, principal_from_payload
from anonboard.core.context import set_principal


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_principal(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Principal:
    """Get the authenticated principal from the JWT access token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        principal = principal_from_payload(decode_access_token(token))
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Attach principal to the logging context
    set_principal(principal.id, principal.role)

    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
