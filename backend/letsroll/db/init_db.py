import asyncio
import logging

from letsroll.db.session import run_migrations

logger = logging.getLogger(__name__)


async def init() -> None:
    await run_migrations()
    logger.info("Database ready")


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init())
