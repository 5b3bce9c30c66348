# passvault/app/api/endpoints/sync.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from passvault.app.api import deps
from passvault.app.core.config import Settings
from passvault.app.core.context import RequestContext
from passvault.app.db.base import get_db
from passvault.app.schemas.sync import SyncPlan, SyncPlanRequest, SyncRequest, SyncResponse
from passvault.app.services import sync
from passvault.app.services.store import run_in_store

router = APIRouter()


@router.get("/", response_model=SyncResponse)
async def get_client_server_diff(
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    """State descriptors of every record of the caller, tombstones included."""
    states = await run_in_store(sync.all_states(db, ctx), config.REQUEST_TIMEOUT_SECONDS)
    return SyncResponse(states=states, length=len(states))


@router.post("/specific", response_model=SyncResponse)
async def sync_specific(
        body: SyncRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    states = await run_in_store(sync.specific_states(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)
    return SyncResponse(states=states, length=len(states))


@router.post("/plan", response_model=SyncPlan)
async def sync_plan(
        body: SyncPlanRequest,
        db: AsyncSession = Depends(get_db),
        ctx: RequestContext = Depends(deps.get_request_context),
        config: Settings = Depends(deps.get_app_settings),
):
    return await run_in_store(sync.plan(db, ctx, body), config.REQUEST_TIMEOUT_SECONDS)
