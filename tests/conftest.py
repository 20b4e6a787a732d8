from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event

from app.core.config import AppSettings, DatabaseSettings, JWTSettings, MailSettings, RedisSettings, Settings
from app.db.database import create_tables
from app.main import create_app
from app.models.tags import Tag
from app.models.users import UserRole, Users
from app.models.videos import Video
from app.services.storage_service import VideoStorage
from app.services.thumbnail_service import ThumbnailError
from app.utils.security import create_token, hash_password

PASSWORD = "secret123"


class FakeMailer:
    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> bool:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


class FakeThumbnailer:
    def __init__(self, storage: VideoStorage):
        self.storage = storage
        self.fail = False

    async def generate(self, video_path: str, video_id: UUID) -> str:
        if self.fail:
            raise ThumbnailError("ffmpeg exited with 1: invalid data")
        output = self.storage.thumbnail_path(video_id)
        output.write_bytes(b"\x89PNG")
        return str(output)


def _enable_sqlite_savepoints(engine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        app=AppSettings(UPLOAD_DIR=str(tmp_path / "uploads"), LOG_FILE=None, BASE_URL="http://testserver"),
        database=DatabaseSettings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        jwt=JWTSettings(JWT_SECRET="test-secret-key-that-is-long-enough-0123456789"),
        mail=MailSettings(EMAIL_HOST=None),
        redis=RedisSettings(),
    )


@pytest.fixture
async def app(settings: Settings):
    application = create_app(settings)
    _enable_sqlite_savepoints(application.state.engine)
    await create_tables(application.state.engine)

    application.state.mailer = FakeMailer()
    application.state.thumbnailer = FakeThumbnailer(application.state.storage)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sessionmaker(app):
    return app.state.sessionmaker


@pytest.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


async def create_user(
    sessionmaker,
    email: str = "user@example.com",
    username: Optional[str] = "user",
    role: UserRole = UserRole.USER,
    password: str = PASSWORD,
) -> Users:
    async with sessionmaker() as session:
        user = Users(email=email, username=username, password=hash_password(password), role=role.value)
        session.add(user)
        await session.commit()
        return user


async def create_video(sessionmaker, user_id: UUID, title: str = "Clip", tags: List[str] = (), **fields: Any) -> Video:
    async with sessionmaker() as session:
        tag_rows = []
        for name in tags:
            tag = Tag(name=name)
            session.add(tag)
            tag_rows.append(tag)
        video = Video(
            **{
                "title": title,
                "filename": f"{title}.mp4",
                "filepath": f"/tmp/{title}.mp4",
                "size": 10,
                "mimetype": "video/mp4",
                "user_id": user_id,
                "tags": tag_rows,
                **fields,
            }
        )
        session.add(video)
        await session.commit()
        return video


def auth_headers(settings: Settings, user: Users) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_token(user.id, user.role, settings.jwt)}"}


@pytest.fixture
async def user(sessionmaker) -> Users:
    return await create_user(sessionmaker)


@pytest.fixture
async def admin(sessionmaker) -> Users:
    return await create_user(sessionmaker, email="admin@example.com", username="admin", role=UserRole.ADMIN)


@pytest.fixture
def user_headers(settings, user) -> Dict[str, str]:
    return auth_headers(settings, user)


@pytest.fixture
def admin_headers(settings, admin) -> Dict[str, str]:
    return auth_headers(settings, admin)


@pytest.fixture
async def video(sessionmaker, user) -> Video:
    return await create_video(sessionmaker, user.id)
