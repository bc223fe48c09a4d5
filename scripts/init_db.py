"""Create the booking tables."""

import asyncio

from sqlalchemy.ext.asyncio import create_async_engine

from src.config import settings
from src.models.base import Base
import src.models  # noqa: F401  registers tables on Base.metadata


async def init():
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    print("Tables created:", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    asyncio.run(init())
