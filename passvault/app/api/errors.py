# passvault/app/api/errors.py
"""
HTTP mapping of core error kinds.

Error bodies are plain text; the status code carries the semantics.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from passvault.app.core.errors import (
    MSG_INTERNAL_SERVER_ERROR,
    MSG_INVALID_DATA_PROVIDED,
    ErrorKind,
    VaultError,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTEGRITY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNIQUENESS_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CANCELLED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.BAD_GATEWAY: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: VaultError) -> int:
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def vault_error_handler(request: Request, exc: VaultError) -> PlainTextResponse:
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
        message = exc.message
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind.value, exc)
        message = str(exc)

    headers = None
    if exc.kind is ErrorKind.AUTHENTICATION:
        headers = {"WWW-Authenticate": "Bearer"}

    return PlainTextResponse(message, status_code=status_code, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    logger.info("%s %s invalid request: %s", request.method, request.url.path, exc.errors()[:1])
    return PlainTextResponse(MSG_INVALID_DATA_PROVIDED, status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    # Hide which methods a path supports
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return PlainTextResponse("Not Found", status_code=status.HTTP_404_NOT_FOUND)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    logger.exception("%s %s crashed", request.method, request.url.path, exc_info=exc)
    return PlainTextResponse(MSG_INTERNAL_SERVER_ERROR, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VaultError, vault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
