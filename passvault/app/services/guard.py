# passvault/app/services/guard.py
"""
Ownership checks.

Every service entry point resolves the owner of the records it touches
through this module; nothing below it reads the caller identity from
anywhere else.
"""
import logging
from typing import Optional

from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_NO_USER_ID_PROVIDED,
    AuthorizationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def authorize(ctx: RequestContext, request_user_id: Optional[int]) -> int:
    """Return the owner id for a request that names its user in the body."""
    if not request_user_id:
        raise ValidationError(MSG_NO_USER_ID_PROVIDED)

    if request_user_id != ctx.user_id:
        logger.warning(
            "user %d tried to access data of user %d", ctx.user_id, request_user_id
        )
        raise AuthorizationError()

    return ctx.user_id


def owner_of(ctx: RequestContext) -> int:
    """Return the owner id for a user-scoped request without a body user id."""
    if not ctx.user_id:
        raise ValidationError(MSG_NO_USER_ID_PROVIDED)
    return ctx.user_id
