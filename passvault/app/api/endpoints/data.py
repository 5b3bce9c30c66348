# passvault/app/api/endpoints/data.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.api import deps
from passvault.app.core.config import Settings
from passvault.app.core.context import RequestContext
from passvault.app.db.base import get_db
from passvault.app.schemas.vault import (
    DeleteRequest,
    DownloadRequest,
    RecordResponse,
    UpdateRequest,
    UploadRequest,
)
from passvault.app.services import vault
from passvault.app.services.store import run_in_store

router = APIRouter()


# 1. UPLOAD NEW RECORDS (create-only, integrity checked)
@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.verify_upload_integrity)],
)
async def upload(
        body: UploadRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    await run_in_store(vault.upload(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)
    return Response(status_code=status.HTTP_201_CREATED)


# 2. DOWNLOAD SELECTED RECORDS
@router.post("/download", response_model=List[RecordResponse])
async def download(
        body: DownloadRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    return await run_in_store(vault.download(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)


# 3. DOWNLOAD EVERY LIVE RECORD OF THE CALLER
@router.get("/all", response_model=List[RecordResponse])
async def download_all(
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    return await run_in_store(vault.download_all(db, ctx), config.REQUEST_TIMEOUT_SECONDS)


# 4. UPDATE (version checked, integrity checked)
@router.put("/update", dependencies=[Depends(deps.verify_update_integrity)])
async def update(
        body: UpdateRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    await run_in_store(vault.update_records(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)
    return Response(status_code=status.HTTP_200_OK)


# 5. DELETE (version checked tombstone)
@router.delete("/delete")
async def delete(
        body: DeleteRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    await run_in_store(vault.delete_records(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)
    return Response(status_code=status.HTTP_200_OK)
