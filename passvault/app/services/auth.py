# passvault/app/services/auth.py
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_LOGIN_ALREADY_EXISTS,
    MSG_USER_NOT_FOUND,
    AuthenticationError,
    NotFoundError,
    UniquenessConflictError,
    ValidationError,
)
from passvault.app.models.user import User
from passvault.app.schemas.user import UserCreate, UserLogin
from passvault.app.security import hashing
from passvault.app.services import guard

logger = logging.getLogger(__name__)


async def register(db: AsyncSession, user_in: UserCreate) -> User:
    if not user_in.login or not user_in.master_password or not user_in.encryption_salt:
        raise ValidationError()

    new_user = User(
        login=user_in.login,
        password_hash=hashing.get_password_hash(user_in.master_password),
        encryption_salt=user_in.encryption_salt,
    )

    try:
        async with db.begin():
            result = await db.execute(select(User.id).where(User.login == user_in.login))
            if result.first() is not None:
                raise UniquenessConflictError(MSG_LOGIN_ALREADY_EXISTS)
            db.add(new_user)
            await db.flush()
    except IntegrityError as e:
        raise UniquenessConflictError(MSG_LOGIN_ALREADY_EXISTS) from e

    logger.info("registered user %d", new_user.id)
    return new_user


async def login(db: AsyncSession, user_in: UserLogin) -> User:
    if not user_in.login or not user_in.master_password:
        raise ValidationError()

    result = await db.execute(select(User).where(User.login == user_in.login))
    user = result.scalars().first()

    # Unknown login and wrong password look the same to the caller
    if user is None or not hashing.verify_password(user_in.master_password, user.password_hash):
        logger.info("failed login for %r", user_in.login)
        raise AuthenticationError(AuthenticationError.BAD_CREDENTIALS)

    return user


async def params(db: AsyncSession, ctx: RequestContext) -> User:
    """The caller's account, for handing out the encryption salt."""
    user_id = guard.owner_of(ctx)
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(MSG_USER_NOT_FOUND)
    return user
