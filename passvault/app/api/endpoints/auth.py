# passvault/app/api/endpoints/auth.py
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.api import deps
from passvault.app.core.config import Settings
from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_LOGIN_FAILED,
    MSG_REGISTRATION_FAILED,
    BadGatewayError,
    StorageError,
)
from passvault.app.db.base import get_db
from passvault.app.models.user import User
from passvault.app.schemas.user import Token, UserCreate, UserLogin, UserParams
from passvault.app.security import jwt
from passvault.app.services import auth
from passvault.app.services.store import run_in_store

router = APIRouter()

T = TypeVar("T")


async def _run_credential_call(operation: Awaitable[T], config: Settings, message: str) -> T:
    # The credential store is upstream of the token issuer: its failures are 502
    try:
        return await run_in_store(operation, config.REQUEST_TIMEOUT_SECONDS)
    except StorageError as e:
        raise BadGatewayError(message) from e


def _issue_token(user: User, response: Response, config: Settings) -> Token:
    access_token = jwt.create_access_token(user.id, config=config)
    response.headers["Authorization"] = f"Bearer {access_token}"
    return Token(access_token=access_token, token_type="bearer")


# 1. REGISTER
@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
        user_in: UserCreate,
        response: Response,
        db: AsyncSession = Depends(get_db),
        config: Settings = Depends(deps.get_app_settings),
):
    user = await _run_credential_call(auth.register(db, user_in), config, MSG_REGISTRATION_FAILED)
    return _issue_token(user, response, config)


# 2. LOGIN
@router.post("/login", response_model=Token)
async def login(
        user_in: UserLogin,
        response: Response,
        db: AsyncSession = Depends(get_db),
        config: Settings = Depends(deps.get_app_settings),
):
    user = await _run_credential_call(auth.login(db, user_in), config, MSG_LOGIN_FAILED)
    return _issue_token(user, response, config)


# 3. KEY DERIVATION PARAMS OF THE CALLER
@router.get("/params", response_model=UserParams)
async def params(
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    return await run_in_store(auth.params(db, ctx), config.REQUEST_TIMEOUT_SECONDS)
