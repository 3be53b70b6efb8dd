"""
Shared fixtures: an in-memory SQLite store per test and an HTTP client bound
to an app built around it.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from main import create_app
from shopdash.database.database import DatabaseManager


@pytest_asyncio.fixture
async def db_manager():
    """Fresh in-memory database with all tables created."""
    manager = DatabaseManager("sqlite+aiosqlite://")
    await manager.init_db()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def client(db_manager):
    # ASGITransport does not run lifespan; db_manager already created the tables
    app = create_app(db_manager)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
