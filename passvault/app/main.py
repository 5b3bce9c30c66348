# passvault/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from passvault.app.api.errors import register_exception_handlers
from passvault.app.api.middleware import (
    AccessLogMiddleware,
    GZipRequestMiddleware,
    TraceIDMiddleware,
)
from passvault.app.api.router import api_router
from passvault.app.core.config import Settings, settings
from passvault.app.core.log import configure_logging
from passvault.app.db.base import Base, create_engine_for, create_session_factory
from passvault.app.security.integrity import HasherPool

# --- Import Models so the tables are registered on Base.metadata ---
from passvault.app.models import record, user  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", app.title, app.version)
    yield
    await engine.dispose()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings
    configure_logging(config.LOG_LEVEL)

    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.PROJECT_VERSION,
        openapi_url=f"{config.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.engine = create_engine_for(config)
    app.state.session_factory = create_session_factory(app.state.engine)
    # One pool per process, keyed once with the integrity key
    app.state.hasher_pool = HasherPool(config.INTEGRITY_HASH_KEY, config.HASHER_POOL_SIZE)

    # Added innermost first: CORS ends up outermost
    app.add_middleware(GZipMiddleware, minimum_size=config.GZIP_MINIMUM_SIZE)
    app.add_middleware(GZipRequestMiddleware, max_size=config.MAX_INFLATED_BODY_SIZE)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(TraceIDMiddleware)
    if config.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Authorization", "X-Trace-Id"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=config.API_PREFIX)

    @app.get("/")
    def root():
        return {"message": f"Welcome to {config.PROJECT_NAME} API"}

    return app


app = create_app()
