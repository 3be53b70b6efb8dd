"""Application entrypoint and configuration for FastAPI.

Sets up lifespan (startup/shutdown), database initialization, and applies
project-wide settings including CORS and the tenant, customer, product and
order routers.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
from get_env_values import LOG_LEVEL
from shopdash.database.database import DatabaseManager
from shopdash.settings import configure_app
import logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle handler.

    On startup, initialize database tables. On shutdown, release the engine's
    connections.
    """
    db_manager = app.state.db_manager
    await db_manager.init_db()
    yield
    await db_manager.dispose()

# Configure root logger to show INFO in CLI
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')


def create_app(db_manager: Optional[DatabaseManager] = None) -> FastAPI:
    """
    Build the API around a store handle. The handle is created once per
    process and shared by every request through `app.state`.
    """
    app = FastAPI(title="Shopify Analytics API", lifespan=lifespan)
    app.state.db_manager = db_manager or DatabaseManager()
    configure_app(app)
    return app


app = create_app()
