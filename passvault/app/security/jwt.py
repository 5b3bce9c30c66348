# passvault/app/security/jwt.py
"""
Bearer token issuance and verification (HS256 via python-jose).

Token claims: iss, sub (user id as decimal string), iat, exp.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from passvault.app.core.config import Settings, settings as default_settings
from passvault.app.core.errors import AuthenticationError
from passvault.app.schemas.user import TokenPayload

logger = logging.getLogger(__name__)


def create_access_token(
    user_id: int,
    expires_delta: Optional[timedelta] = None,
    config: Optional[Settings] = None,
) -> str:
    config = config or default_settings
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "iss": config.TOKEN_ISSUER,
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str, config: Optional[Settings] = None) -> int:
    """
    Verify signature, expiration and issuer, and return the user id.

    Raises AuthenticationError with reason EXPIRED_TOKEN for an expired but
    otherwise well-formed token and INVALID_TOKEN for everything else.
    """
    config = config or default_settings
    try:
        payload = jwt.decode(
            token,
            config.SECRET_KEY,
            algorithms=[config.ALGORITHM],
            issuer=config.TOKEN_ISSUER,
            options={"require_exp": True, "require_sub": True, "require_iss": True},
        )
        token_data = TokenPayload(**payload)
    except ExpiredSignatureError:
        raise AuthenticationError(AuthenticationError.EXPIRED_TOKEN)
    except (JWTError, ValidationError) as e:
        logger.info("token rejected: %s", e)
        raise AuthenticationError(AuthenticationError.INVALID_TOKEN)

    try:
        user_id = int(token_data.sub)
    except (TypeError, ValueError):
        logger.info("token subject is not a user id: %r", token_data.sub)
        raise AuthenticationError(AuthenticationError.INVALID_TOKEN)

    if user_id <= 0 or user_id >= 2 ** 63:
        raise AuthenticationError(AuthenticationError.INVALID_TOKEN)

    return user_id


def token_from_header(authorization: Optional[str]) -> str:
    """
    Extract the token from `Authorization: <scheme> <token>`.

    The scheme is not checked; the second whitespace-separated field is the
    token.
    """
    if not authorization:
        raise AuthenticationError(AuthenticationError.MISSING_HEADER)

    parts = authorization.split(" ")
    if len(parts) < 2:
        raise AuthenticationError(AuthenticationError.MALFORMED_HEADER)

    token = parts[1].strip()
    if not token:
        raise AuthenticationError(AuthenticationError.EMPTY_TOKEN)

    return token
