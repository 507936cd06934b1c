"""Seed script — Creates the tables and the initial admin account.

Usage:
    python -m civic_reporter.seed

Creates:
    - All tables from ORM metadata
    - 1 admin account: SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD
      (default admin@civic.com / admin123)

Idempotent: an existing account with the seed email is left untouched.
"""

import asyncio
import logging

from civic_reporter.config import settings
from civic_reporter.database import Base, async_session, engine
from civic_reporter.models import User, UserRole
from civic_reporter.repositories.user_repository import user_repository
from civic_reporter.utils.password import hash_password

logger = logging.getLogger(__name__)


async def seed() -> None:
    """Create tables if they don't exist, then the admin user."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        existing: User | None = await user_repository.get_by_email(db, settings.SEED_ADMIN_EMAIL)
        if existing is not None:
            logger.info("Admin %s already exists. Skipping.", existing.email)
            return

        admin: User = await user_repository.create(
            db,
            {
                "name": "System Admin",
                "email": settings.SEED_ADMIN_EMAIL.lower(),
                "password_hash": hash_password(settings.SEED_ADMIN_PASSWORD),
                "role": UserRole.ADMIN.value,
            },
        )
        await db.commit()
        logger.info("Seeded admin user %s (id=%s)", admin.email, admin.id)


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(seed())
