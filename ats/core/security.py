"""
Bearer token verification.

Tokens are issued by the surrounding identity service; this module only
verifies their signature and expiry and extracts the subject user ID.
"""

from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ats.core.config import Settings, get_settings
from ats.core.errors import UnauthenticatedError
from ats.core.logging import get_logger

logger = get_logger(__name__)


def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string to decode
        settings: Settings holding the key, defaults to ``get_settings()``

    Returns:
        Dictionary of decoded token claims

    Raises:
        UnauthenticatedError: If token is empty, invalid or expired
    """
    if not token:
        raise UnauthenticatedError("Authentication token is required")

    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError as e:
        logger.warning("Token has expired", error=str(e))
        raise UnauthenticatedError("Token has expired") from e
    except JWTError as e:
        logger.warning(
            "Invalid token",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UnauthenticatedError("Invalid authentication token") from e

    logger.debug("Token decoded successfully", subject=payload.get("sub"))
    return payload


def get_token_user_id(token: str, settings: Optional[Settings] = None) -> int:
    """
    Extract the numeric user ID from a token's ``sub`` claim.

    Raises:
        UnauthenticatedError: If the claim is missing or not an integer
    """
    payload = decode_token(token, settings)
    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        logger.warning("Token subject is not a user id", subject=subject)
        raise UnauthenticatedError("Invalid authentication token") from e
