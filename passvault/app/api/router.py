# passvault/app/api/router.py
from fastapi import APIRouter, Depends

from passvault.app.api import deps
from passvault.app.api.endpoints import auth, data, sync, version

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
# Every /data and /sync route requires a valid bearer token
api_router.include_router(
    data.router, prefix="/data", tags=["data"], dependencies=[Depends(deps.get_request_context)]
)
api_router.include_router(
    sync.router, prefix="/sync", tags=["sync"], dependencies=[Depends(deps.get_request_context)]
)
api_router.include_router(version.router, prefix="/version", tags=["version"])
