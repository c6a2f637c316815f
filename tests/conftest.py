"""
ReadyForms pytest fixtures.

Provides:
- Settings pointing at a throwaway file-backed SQLite database
- The application built by ``create_app`` and an httpx client bound to it
- A direct ``AsyncSession`` for arranging and inspecting rows
- Registered users (two members and an admin) and a topic
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from readyforms.config import Settings
from readyforms.db.models import Base, Topic, User
from readyforms.db.session import create_db_engine, create_session_factory
from readyforms.main import create_app
from readyforms.utils.security import hash_password

from tests.helpers import auth_headers, login, register


@pytest.fixture
def settings(tmp_path) -> Settings:
    # A file (not :memory:) so that concurrent sessions get separate connections.
    return Settings(
        ENV="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'readyforms-test.db'}",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        REDIS_ENABLED=False,
        ALLOW_ADMIN_CREATION=False,
        LOG_LEVEL="DEBUG",
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_db_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def alice(client) -> dict:
    return await register(client, "Alice", "alice@example.com")


@pytest_asyncio.fixture
async def bob(client) -> dict:
    return await register(client, "Bob", "bob@example.com")


@pytest_asyncio.fixture
async def admin(client, session_factory, settings) -> dict:
    async with session_factory() as session:
        user = User(
            name="Admin",
            email="admin@example.com",
            password_hash=hash_password("admin-pass", rounds=settings.BCRYPT_ROUNDS),
            is_admin=True,
        )
        session.add(user)
        await session.commit()
    tokens = await login(client, "admin@example.com", "admin-pass")
    return {"id": tokens["user"]["id"], "user": tokens["user"], "tokens": tokens, "headers": auth_headers(tokens)}


@pytest_asyncio.fixture
async def topic(session_factory) -> dict:
    async with session_factory() as session:
        row = Topic(name="Education", description="Quizzes and course feedback")
        session.add(row)
        await session.commit()
        return {"id": str(row.id), "name": row.name, "version": row.version}
