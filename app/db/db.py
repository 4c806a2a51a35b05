import asyncio
import sys

from .models import Base
from .seeds.main import seed_all_data
from .session import engine

from app.utils.logging import get_logger

logger = get_logger()


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Created all tables.")


async def drop_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Dropped all tables.")


async def init_db(force: bool = False, with_sample: bool = True):
    """
    Create tables and optionally insert sample students.

    With `force` every table is dropped first and the sample data replaces whatever
    was there; otherwise samples are only added to an empty students table.
    """
    if force:
        await drop_tables()
    await create_tables()
    if with_sample:
        await seed_all_data(only_if_empty=not force)


if __name__ == "__main__":
    # python -m app.db.db [--force|-f] [--no-sample]
    args = sys.argv[1:]
    asyncio.run(
        init_db(
            force="--force" in args or "-f" in args,
            with_sample="--no-sample" not in args,
        )
    )
