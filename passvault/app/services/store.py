# passvault/app/services/store.py
import asyncio
import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from passvault.app.core.errors import CancelledError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: SQLAlchemyError) -> bool:
    if isinstance(error, OperationalError):
        return True
    return isinstance(error, DBAPIError) and error.connection_invalidated


async def run_in_store(operation: Awaitable[T], timeout: float) -> T:
    """
    Await a service call that talks to the database.

    The call is bounded by `timeout` seconds. A timed-out call is cancelled,
    which rolls back its open transaction, and surfaces as CancelledError.
    Raw SQLAlchemy failures are wrapped into StorageError; VaultErrors pass
    through unchanged.
    """
    try:
        return await asyncio.wait_for(operation, timeout)
    except asyncio.TimeoutError:
        logger.warning("store operation timed out after %.1fs", timeout)
        raise CancelledError()
    except SQLAlchemyError as e:
        retryable = is_retryable(e)
        logger.exception("store operation failed (retryable=%s)", retryable)
        raise StorageError(retryable=retryable) from e
