# passvault/app/services/sync.py
"""
Sync engine: record state descriptors for client reconciliation.

Descriptors include tombstones so clients learn about deletions. Each
descriptor reflects one committed state of its record; a response is not a
snapshot across records.
"""
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_EMPTY_CLIENT_ID_FOR_SYNC,
    MSG_NO_CLIENT_IDS_FOR_SYNC,
    ValidationError,
)
from passvault.app.models.record import Record
from passvault.app.schemas.sync import RecordState, SyncPlan, SyncPlanRequest, SyncRequest
from passvault.app.services import guard
from passvault.app.services.sync_plan import build_sync_plan

logger = logging.getLogger(__name__)


def _state_columns():
    return select(
        Record.client_side_id,
        Record.hash,
        Record.version,
        Record.deleted,
        Record.updated_at,
    )


async def _load_states(db: AsyncSession, stmt) -> List[RecordState]:
    result = await db.execute(stmt.order_by(Record.server_id))
    return [RecordState(**row) for row in result.mappings()]


def _check_client_ids(client_side_ids) -> None:
    for client_side_id in client_side_ids:
        if not client_side_id or not client_side_id.strip():
            raise ValidationError(MSG_EMPTY_CLIENT_ID_FOR_SYNC)


async def all_states(db: AsyncSession, ctx: RequestContext) -> List[RecordState]:
    owner_id = guard.owner_of(ctx)
    states = await _load_states(db, _state_columns().where(Record.user_id == owner_id))
    logger.debug("user %d: %d record states", owner_id, len(states))
    return states


async def specific_states(db: AsyncSession, ctx: RequestContext, request: SyncRequest) -> List[RecordState]:
    """States of the requested records; unknown ids are left out."""
    owner_id = guard.authorize(ctx, request.user_id)

    if not request.client_side_ids:
        raise ValidationError(MSG_NO_CLIENT_IDS_FOR_SYNC)
    _check_client_ids(request.client_side_ids)

    return await _load_states(
        db,
        _state_columns().where(
            Record.user_id == owner_id,
            Record.client_side_id.in_(set(request.client_side_ids)),
        ),
    )


async def plan(db: AsyncSession, ctx: RequestContext, request: SyncPlanRequest) -> SyncPlan:
    """Compare the client's states with the server's full set."""
    owner_id = guard.authorize(ctx, request.user_id)
    _check_client_ids(state.client_side_id for state in request.states)

    server_states = await _load_states(db, _state_columns().where(Record.user_id == owner_id))
    result = build_sync_plan(server_states, request.states)

    logger.info(
        "sync plan for user %d: download=%d upload=%d update=%d delete_client=%d delete_server=%d",
        owner_id,
        len(result.download),
        len(result.upload),
        len(result.update),
        len(result.delete_client),
        len(result.delete_server),
    )
    return result
