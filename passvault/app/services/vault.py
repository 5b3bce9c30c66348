# passvault/app/services/vault.py
"""
Mutation engine for vault records.

Each batch (upload, update, delete) runs in a single transaction: either
every item of the batch is written or none is.

Version protocol:
- upload creates records at version 0
- update and delete name the version the client last saw; the write only
  happens when it still matches, and bumps the version by one
- a mismatch is a version conflict: the client must sync and retry

Updates and deletes are conditional UPDATE statements, so two concurrent
batches touching the same record are serialized by the database and the
later one sees the earlier version bump.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.core.context import RequestContext
from passvault.app.core.errors import (
    MSG_INVALID_DATA_PROVIDED,
    MSG_NO_DELETE_REQUESTS_PROVIDED,
    MSG_NO_DOWNLOAD_REQUESTS_PROVIDED,
    MSG_NO_PRIVATE_DATA_PROVIDED,
    MSG_NO_UPDATE_REQUESTS_PROVIDED,
    MSG_VERSION_IS_NOT_SPECIFIED,
    NotFoundError,
    UniquenessConflictError,
    ValidationError,
    VersionConflictError,
)
from passvault.app.models.record import Record
from passvault.app.schemas.vault import (
    DeleteEntry,
    DeleteRequest,
    DownloadRequest,
    UpdateItem,
    UpdateRequest,
    UploadItem,
    UploadRequest,
)
from passvault.app.services import guard

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _invalid_item(index: int, field: str) -> ValidationError:
    return ValidationError(f"{MSG_INVALID_DATA_PROVIDED}: {field} is empty at index {index}")


def _validate_upload_item(index: int, item: UploadItem) -> None:
    if not item.client_side_id.strip():
        raise _invalid_item(index, "client_side_id")
    if not item.payload:
        raise _invalid_item(index, "payload")
    if not item.hash.strip():
        raise _invalid_item(index, "hash")


def _validate_version(index: int, version: Optional[int]) -> None:
    if version is None:
        raise ValidationError(f"{MSG_VERSION_IS_NOT_SPECIFIED} at index {index}")
    if version < 0:
        raise ValidationError(f"{MSG_INVALID_DATA_PROVIDED}: negative version at index {index}")


def _validate_update_item(index: int, item: UpdateItem) -> None:
    if not item.client_side_id.strip():
        raise _invalid_item(index, "client_side_id")
    _validate_version(index, item.version)
    if not item.payload:
        raise _invalid_item(index, "payload")
    if not item.hash.strip():
        raise _invalid_item(index, "hash")


def _validate_delete_entry(index: int, entry: DeleteEntry) -> None:
    if not entry.client_side_id.strip():
        raise _invalid_item(index, "client_side_id")
    _validate_version(index, entry.version)


def _live_records(owner_id: int):
    return select(Record).where(
        Record.user_id == owner_id,
        Record.deleted.is_(False),
    )


async def _reject_write(db: AsyncSession, owner_id: int, client_side_id: str, version: int) -> None:
    """
    Explain why a conditional write touched no row.

    Absent or tombstoned → not found; otherwise the stored version moved on.
    """
    result = await db.execute(
        select(Record.version, Record.deleted).where(
            Record.user_id == owner_id,
            Record.client_side_id == client_side_id,
        )
    )
    row = result.first()

    if row is None or row.deleted:
        logger.warning("record %r of user %d not found", client_side_id, owner_id)
        raise NotFoundError(client_side_id=client_side_id)

    logger.warning(
        "version conflict on %r of user %d: stored=%d provided=%d",
        client_side_id, owner_id, row.version, version,
    )
    raise VersionConflictError(client_side_id=client_side_id)


# ─────────────────────────────────────────────────────────────────────────────
# Write path
# ─────────────────────────────────────────────────────────────────────────────
async def upload(db: AsyncSession, ctx: RequestContext, request: UploadRequest) -> List[Record]:
    """Create new records at version 0. Fails as a whole on any existing id."""
    owner_id = guard.authorize(ctx, request.user_id)

    items = request.payload_list
    if not items:
        raise ValidationError(MSG_NO_PRIVATE_DATA_PROVIDED)

    seen = set()
    for index, item in enumerate(items):
        _validate_upload_item(index, item)
        if item.client_side_id in seen:
            raise UniquenessConflictError(client_side_id=item.client_side_id)
        seen.add(item.client_side_id)

    now = _now()
    records = [
        Record(
            user_id=owner_id,
            client_side_id=item.client_side_id,
            payload=item.payload,
            hash=item.hash,
            version=0,
            deleted=False,
            created_at=now,
            updated_at=now,
        )
        for item in items
    ]

    try:
        async with db.begin():
            # Tombstones count: a client_side_id is never reused
            result = await db.execute(
                select(Record.client_side_id).where(
                    Record.user_id == owner_id,
                    Record.client_side_id.in_(seen),
                )
            )
            existing = result.scalars().first()
            if existing is not None:
                logger.warning("record %r of user %d already exists", existing, owner_id)
                raise UniquenessConflictError(client_side_id=existing)

            db.add_all(records)
            await db.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent upload of the same id
        logger.warning("unique constraint violated on upload for user %d: %s", owner_id, e.orig)
        raise UniquenessConflictError() from e

    logger.info("uploaded %d records for user %d", len(records), owner_id)
    return records


async def update_records(db: AsyncSession, ctx: RequestContext, request: UpdateRequest) -> None:
    """Replace payload and hash of live records whose version still matches."""
    owner_id = guard.authorize(ctx, request.user_id)

    items = request.private_data_updates
    if not items:
        raise ValidationError(MSG_NO_UPDATE_REQUESTS_PROVIDED)

    for index, item in enumerate(items):
        _validate_update_item(index, item)

    now = _now()
    async with db.begin():
        for item in items:
            result = await db.execute(
                update(Record)
                .where(
                    Record.user_id == owner_id,
                    Record.client_side_id == item.client_side_id,
                    Record.version == item.version,
                    Record.deleted.is_(False),
                )
                .values(
                    payload=item.payload,
                    hash=item.hash,
                    version=Record.version + 1,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await _reject_write(db, owner_id, item.client_side_id, item.version)

    logger.info("updated %d records for user %d", len(items), owner_id)


async def delete_records(db: AsyncSession, ctx: RequestContext, request: DeleteRequest) -> None:
    """Tombstone live records whose version still matches."""
    owner_id = guard.authorize(ctx, request.user_id)

    entries = request.delete_entries
    if not entries:
        raise ValidationError(MSG_NO_DELETE_REQUESTS_PROVIDED)

    for index, entry in enumerate(entries):
        _validate_delete_entry(index, entry)

    now = _now()
    async with db.begin():
        for entry in entries:
            result = await db.execute(
                update(Record)
                .where(
                    Record.user_id == owner_id,
                    Record.client_side_id == entry.client_side_id,
                    Record.version == entry.version,
                    Record.deleted.is_(False),
                )
                .values(
                    deleted=True,
                    version=Record.version + 1,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await _reject_write(db, owner_id, entry.client_side_id, entry.version)

    logger.info("tombstoned %d records for user %d", len(entries), owner_id)


# ─────────────────────────────────────────────────────────────────────────────
# Read path (tombstones excluded)
# ─────────────────────────────────────────────────────────────────────────────
async def download(db: AsyncSession, ctx: RequestContext, request: DownloadRequest) -> List[Record]:
    owner_id = guard.authorize(ctx, request.user_id)

    ids = request.client_side_ids
    if not ids:
        raise ValidationError(MSG_NO_DOWNLOAD_REQUESTS_PROVIDED)
    for index, client_side_id in enumerate(ids):
        if not client_side_id.strip():
            raise _invalid_item(index, "client_side_id")

    result = await db.execute(
        _live_records(owner_id)
        .where(Record.client_side_id.in_(set(ids)))
        .order_by(Record.server_id)
    )
    return list(result.scalars().all())


async def download_all(db: AsyncSession, ctx: RequestContext) -> List[Record]:
    owner_id = guard.owner_of(ctx)
    result = await db.execute(_live_records(owner_id).order_by(Record.server_id))
    return list(result.scalars().all())
