import os
import logging
from contextlib import asynccontextmanager
from operator import itemgetter
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from get_env_values import DATABASE_URL
from shopdash.models.tables import Base


load_dotenv(os.path.join(os.path.abspath(Path(__file__).parent), "db.env"))

LOCAL_DATABASE_URL = "sqlite+aiosqlite:///./shopdash.db"


def resolve_database_url():
    """
    Pick the store URL: DATABASE_URL wins, then the DB_* variables from db.env
    (PostgreSQL via asyncpg), then a local SQLite file for development.
    """
    if DATABASE_URL:
        return DATABASE_URL
    if os.getenv("DB_USER"):
        user, passwd, db_name, host, port = itemgetter(
            "DB_USER", "PASSWD", "DB_NAME", "HOST", "PORT"
        )(os.environ)
        return f"postgresql+asyncpg://{user}:{passwd}@{host}:{port}/{db_name}"
    return LOCAL_DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Owns the async engine and session factory for the tenant, customer, product
    and order tables. One instance is created per process and handed to the
    request handlers through `get_db_manager`.
    """
    def __init__(self, database_url: Optional[str] = None):
        """
        Create the async engine and sessionmaker. Nothing connects until the
        first session is opened.
        """
        self.DATABASE_URL = database_url or resolve_database_url()
        engine_kwargs = {}
        if self.DATABASE_URL.startswith("sqlite") and (
            self.DATABASE_URL.endswith("://") or ":memory:" in self.DATABASE_URL
        ):
            # One shared connection, otherwise every session sees its own empty database
            engine_kwargs["poolclass"] = StaticPool
        self.engine = create_async_engine(self.DATABASE_URL, echo=False, **engine_kwargs)  # echo=True for debugging
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.AsyncSessionLocal = sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def init_db(self):
        """
        Create all tables in the database if they do not exist.
        Should be called at application startup.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logging.info("Database tables created or verified.")

    async def dispose(self):
        await self.engine.dispose()

    @asynccontextmanager
    async def transaction(self):
        """
        Open a session with a transaction that commits when the block exits
        cleanly and rolls back on any exception. Handlers run their whole
        check-then-act sequence inside one of these.
        """
        async with self.AsyncSessionLocal() as session:
            async with session.begin():
                yield session


def get_db_manager(request: Request) -> DatabaseManager:
    """FastAPI dependency returning the store handle attached at startup."""
    return request.app.state.db_manager
