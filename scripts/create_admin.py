import asyncio
import sys
from pathlib import Path

from loguru import logger

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import DatabaseSettings
from app.db.database import create_tables, get_async_sessionmaker, get_engine
from app.models.users import UserRole, Users
from app.utils.security import hash_password


async def create_admin(email: str, password: str, username: str) -> None:
    db_settings = DatabaseSettings()
    engine = get_engine(db_settings)
    if db_settings.create_tables:
        await create_tables(engine)

    sessionmaker = get_async_sessionmaker(engine)
    try:
        async with sessionmaker() as session:
            user = Users(
                email=email.strip().lower(),
                password=hash_password(password),
                username=username,
                role=UserRole.ADMIN.value,
                email_activated=True,
                accept_terms=True,
            )
            session.add(user)
            await session.commit()
            logger.success(f"Administrator {user.email} created with id {user.id}")
    finally:
        await engine.dispose()


async def main():
    if len(sys.argv) < 4:
        logger.error("Usage: python scripts/create_admin.py <email> <password> <username>")
        sys.exit(1)

    email, password, username = sys.argv[1:4]
    if len(password) < 6:
        logger.error("Password must be at least 6 characters long")
        sys.exit(1)

    try:
        await create_admin(email, password, username)
    except Exception as e:
        logger.exception(f"Error creating administrator: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
