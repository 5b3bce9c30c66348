# passvault/app/db/__main__.py
"""Create the database tables: python -m passvault.app.db"""
import asyncio
import logging
import sys

from passvault.app.core.config import settings
from passvault.app.core.log import configure_logging
from passvault.app.db.base import Base, create_engine_for
from passvault.app.models import Record, User  # noqa: F401

logger = logging.getLogger(__name__)


async def init_models(drop: bool = False):
    engine = create_engine_for(settings)
    try:
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("creating tables on %s", engine.url.render_as_string(hide_password=True))
            await conn.run_sync(Base.metadata.create_all)
            logger.info("tables created")
    except Exception:
        logger.exception("table creation failed")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(init_models(drop="--drop" in sys.argv))
