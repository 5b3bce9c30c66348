# passvault/app/api/endpoints/version.py
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from passvault.app.api import deps
from passvault.app.core.config import Settings

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def get_server_version(config: Settings = Depends(deps.get_app_settings)):
    return config.PROJECT_VERSION
