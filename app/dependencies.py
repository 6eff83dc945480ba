"""
Authentication dependencies for FastAPI.
Identifies the caller from a JWT issued by the external auth provider.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config import Settings, get_settings
from app.core.exceptions import InvalidTokenError, unauthorized

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Width of the user_id columns
USER_ID_MAX_LENGTH = 255


def verify_token(token: str, settings: Settings) -> str:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string
        settings: Application settings holding the signing key

    Returns:
        The token subject (user ID)

    Raises:
        InvalidTokenError: If token is invalid, expired or has no subject
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"[Auth] Token verification failed: {e}")
        raise InvalidTokenError("Invalid or expired token")

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Token has no subject")
    if len(str(subject)) > USER_ID_MAX_LENGTH:
        raise InvalidTokenError("Token subject is too long")
    return str(subject)


async def get_current_user_id(
        credentials: Annotated[
            Optional[HTTPAuthorizationCredentials],
            Depends(security)
        ],
        settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """
    Dependency to get the current authenticated user ID.

    Extracts JWT from Authorization header and validates it.

    Raises:
        HTTPException: If authentication fails
    """
    if not credentials:
        raise unauthorized()

    try:
        return verify_token(credentials.credentials, settings)
    except InvalidTokenError as e:
        raise unauthorized(detail=e.message)


# Type alias for cleaner dependency injection
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
