"""
Seed script to create the tables and the first Admin user.

Run once with env set:
  ADMIN_USERNAME=admin
  ADMIN_EMAIL=admin@example.com
  ADMIN_PASSWORD=YourSecurePassword

  python -m schooldesk.db.seed_admin

Creates every table that does not exist yet, then one user with role Admin
and no school. An existing user with the same username is promoted to Admin
and gets the configured password.
"""
import asyncio
import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

# Registers every table on Base.metadata
import schooldesk.core.models  # noqa: F401
from schooldesk.auth.models import User
from schooldesk.auth.security import hash_password
from schooldesk.core.config import settings
from schooldesk.core.enums import Role
from schooldesk.core.logging import configure_logging
from schooldesk.db.session import Base, build_engine, build_sessionmaker

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_admin(db: AsyncSession, username: str, email: str, password: str) -> User:
    stmt = select(User).where(or_(User.username == username, User.email == email))
    admin = (await db.execute(stmt)).scalars().first()
    if admin is None:
        admin = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=Role.ADMIN.value,
            school_id=None,
        )
        db.add(admin)
        logger.info("Created Admin user: %s", username)
    else:
        admin.role = Role.ADMIN.value
        admin.school_id = None
        admin.password_hash = hash_password(password)
        logger.info("Updated existing user to Admin: %s", admin.username)
    await db.commit()
    await db.refresh(admin)
    return admin


async def main() -> None:
    configure_logging(settings.log_level)
    engine = build_engine(settings.database_url)
    try:
        await create_tables(engine)
        if not (settings.admin_username and settings.admin_email and settings.admin_password):
            logger.warning("ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping Admin user.")
            return
        async with build_sessionmaker(engine)() as db:
            try:
                await seed_admin(db, settings.admin_username, settings.admin_email, settings.admin_password)
            except Exception:
                await db.rollback()
                logger.exception("Admin seed failed")
                raise
    finally:
        await engine.dispose()
    logger.info("Admin seed done.")


if __name__ == "__main__":
    asyncio.run(main())
