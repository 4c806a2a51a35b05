"""
Main seeding file that orchestrates all database seeding operations.
"""

from app.db.session import AsyncSessionLocal
from app.utils.logging import get_logger

from .students_seed import seed_students

logger = get_logger()


async def seed_all_data(only_if_empty: bool = False):
    async with AsyncSessionLocal() as db_session:
        try:
            logger.info("Starting database seeding...")
            await seed_students(db_session, only_if_empty=only_if_empty)
            logger.info("Database seeding completed successfully!")
        except Exception as e:
            logger.error(f"Error during seeding: {e}")
            await db_session.rollback()
            raise
