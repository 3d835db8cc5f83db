"""
Shared fixtures: a throwaway SQLite database and app per test.
"""

import httpx
import pytest
import pytest_asyncio

from config.settings import Settings
from database.session import init_models
from main import create_app

TEST_SECRET = "test-secret-key-not-for-production"


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}",
        upload_dir=str(tmp_path / "uploads"),
        bcrypt_rounds=4,
        auth_rate_limit=0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await init_models(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def todo_store(app):
    return app.state.todo_store


@pytest.fixture
def auth_service(app):
    return app.state.auth_service
