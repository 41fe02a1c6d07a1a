# =============================================================================
# foodapi/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the composition layer of the SB Foods API. It wires the request
# pipeline, the route collaborators and the terminal error handlers into a
# single FastAPI application, and connects MongoDB in the background on
# startup.
#
# Usage:
#   sbfoods-api                         (see foodapi/server.py)
#   uvicorn foodapi.main:app --reload
# =============================================================================

import asyncio
import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from datastore.mongo_client import DatabaseConnectionError, MongoConnector
from foodapi.config import Settings, get_settings
from foodapi.context import AppContext
from foodapi.exceptions import register_exception_handlers
from foodapi.middleware import build_pipeline, pipeline_middleware
from foodapi.routers import ROUTE_GROUPS, default_collaborators, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if get_settings().is_development else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_context(settings: Settings | None = None) -> AppContext:
    """Build the application context with a real MongoDB connector."""
    settings = settings or get_settings()
    return AppContext(
        settings=settings,
        database=MongoConnector(
            settings.MONGODB_URI,
            default_db_name=settings.MONGODB_DB_NAME,
            server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        ),
    )


async def connect_database(context: AppContext) -> None:
    """
    Connect to MongoDB once; report a failure as fatal.

    Runs as a background task so the listener starts without waiting for
    the database. On failure the context is marked failed with exit code 1,
    which stops the server.
    """
    try:
        host = await context.database.connect()
    except DatabaseConnectionError as e:
        logger.error(f"Database connection error: {e}")
        context.fail(exit_code=1)
        return
    except Exception as e:
        logger.exception(f"Database connection error: {e}")
        context.fail(exit_code=1)
        return
    logger.info(f"MongoDB Connected: {host}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: start the background database connect
    - Shutdown: close the database handle
    """
    context: AppContext = app.state.context
    settings = context.settings

    logger.info(f"Starting SB Foods API in {settings.NODE_ENV} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if settings.is_production and not settings.cors_origins_list:
        logger.warning("FRONTEND_URL is empty: all cross-origin requests will be rejected")

    context.connect_task = asyncio.create_task(connect_database(context))

    yield

    logger.info("Shutting down SB Foods API")
    await context.close()


def create_app(
    context: AppContext | None = None,
    collaborators: Mapping[str, APIRouter] | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Application context; a fresh one from the environment if omitted
        collaborators: Routers replacing the default route collaborators,
            keyed by ROUTE_GROUPS name

    Raises:
        ValueError: If a collaborator name is not in ROUTE_GROUPS
    """
    context = context or create_context()
    settings = context.settings

    routers = default_collaborators()
    if collaborators:
        unknown = sorted(set(collaborators) - set(ROUTE_GROUPS))
        if unknown:
            raise ValueError(f"Unknown route collaborators: {', '.join(unknown)}")
        routers.update(collaborators)

    app = FastAPI(
        title="SB Foods API",
        description="REST API for the SB Foods ordering platform",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
        middleware=pipeline_middleware(build_pipeline(settings, context.rate_limiter)),
    )
    app.state.context = context

    # =========================================================================
    # Routers
    # =========================================================================

    # Health check endpoint
    app.include_router(health.router, prefix="/api", tags=["Health"])

    # Route collaborators
    for name, prefix in ROUTE_GROUPS.items():
        app.include_router(routers[name], prefix=prefix, tags=[name.title()])

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    return app


# Application instance for `uvicorn foodapi.main:app`
app = create_app()
