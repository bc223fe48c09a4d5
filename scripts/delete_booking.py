"""Delete one booking, e.g. to let a visitor rebook the same date.

Usage:
    python -m scripts.delete_booking --email jane@example.com --date 2026-11-02
    python -m scripts.delete_booking --id 5f0c...
"""

import argparse
import asyncio

from src.database import async_session_factory, engine
from src.repositories.booking import BookingRepository


def parse_args(argv=None) -> dict:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--id", dest="id")
    parser.add_argument("--email")
    parser.add_argument("--date", dest="preferred_date", help="YYYY-MM-DD")
    args = parser.parse_args(argv)

    filters = {key: value for key, value in vars(args).items() if value}
    if not filters:
        parser.error("give --id, or --email and --date")
    return filters


async def delete(filters: dict) -> int:
    async with async_session_factory() as session:
        count = await BookingRepository(session).delete_one(**filters)
    await engine.dispose()
    return count


if __name__ == "__main__":
    deleted = asyncio.run(delete(parse_args()))
    print(f"Deleted {deleted} booking(s)")
