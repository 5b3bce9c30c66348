# passvault/app/api/deps.py
import logging
from typing import Optional, Sequence, Type, TypeVar

from fastapi import Depends, Header, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from passvault.app.core.config import Settings
from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_INVALID_JSON,
    IntegrityCheckError,
    ValidationError,
)
from passvault.app.schemas.vault import UpdateRequest, UploadRequest
from passvault.app.security import jwt
from passvault.app.security.integrity import HasherPool

logger = logging.getLogger(__name__)

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_request_context(
    authorization: Optional[str] = Header(None),
    config: Settings = Depends(get_app_settings),
) -> RequestContext:
    """Authenticate the bearer token and bind the caller's id to the request."""
    token = jwt.token_from_header(authorization)
    user_id = jwt.decode_access_token(token, config=config)
    return RequestContext(user_id=user_id)


def get_hasher_pool(request: Request) -> HasherPool:
    pool = getattr(request.app.state, "hasher_pool", None)
    if pool is None:
        raise RuntimeError("hasher pool is not initialized")
    return pool


async def _read_envelope(request: Request, model: Type[EnvelopeT]) -> EnvelopeT:
    # Starlette caches the body, the endpoint parses it again afterwards
    body = await request.body()
    try:
        return model.model_validate_json(body)
    except PydanticValidationError as e:
        logger.info("envelope rejected: %s", e.errors()[:1])
        raise ValidationError(MSG_INVALID_JSON)


def _check_envelope(pool: HasherPool, items: Sequence[BaseModel], supplied: str) -> None:
    if not pool.verify(items, supplied):
        logger.warning("integrity check failed for %d items", len(items))
        raise IntegrityCheckError()


async def verify_upload_integrity(
    request: Request,
    # Unused; makes authentication run before the body is hashed
    ctx: RequestContext = Depends(get_request_context),
    pool: HasherPool = Depends(get_hasher_pool),
) -> None:
    envelope = await _read_envelope(request, UploadRequest)
    _check_envelope(pool, envelope.payload_list, envelope.hash)


async def verify_update_integrity(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    pool: HasherPool = Depends(get_hasher_pool),
) -> None:
    envelope = await _read_envelope(request, UpdateRequest)
    _check_envelope(pool, envelope.private_data_updates, envelope.hash)
