"""The Tally HTTP service.

Analytics routes live under `/api/v1/analytics`; `/health` stays
unversioned for probes. The service never authenticates: the gateway in front
of it resolves the user and forwards the id in `X-User-Id`.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from tally.infrastructure.persistence.sqlalchemy.init_db import create_tables
from tally.presentation.api.dependencies import get_engine, get_rest_client
from tally.presentation.api.exception_handlers import setup_exception_handlers
from tally.presentation.api.routers import analytics_router
from tally_config.settings import Settings, get_settings


@lru_cache(maxsize=1)
def configure_logging() -> None:
    """One stdout handler for the whole process, set up on first app creation."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("tally").setLevel(log_level)
    logging.getLogger("tally_config").setLevel(log_level)

    # Request and SQL chatter only at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Analytics",
        "description": """Spending analytics computed on demand.

**Aggregation:**
- `/year-over-year` - Yearly, quarterly and monthly totals with growth
- `/history` - Monthly budget utilization
- `/dashboard/*` - Window metrics and monthly summaries

**Forecasting:**
- `/forecast/spending` - Trend and seasonality forecast, total and per category
- `/forecast/seasonal` - Seasonal forecast from past years
- `/forecast/budgets` - Budget overrun risk
- `/forecast/projection` - Projection from the budget history trend

**Insights and alerts:**
- `/insights/*` - Predictive, historical, category and time-based insights
- `POST /alerts` - Budget, surge, savings and goal alerts (stored)

Identify the user with the `X-User-Id` header.
""",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Own the engine and the PostgREST client for the life of the process."""
    settings = app.state.settings
    logger.info(
        "Tally API v%s starting, reading from %s",
        API_VERSION,
        settings.data_source,
    )
    engine = get_engine()
    if settings.data_source == "postgres":
        try:
            await create_tables(engine)
        except (ConnectionRefusedError, OperationalError):
            logger.critical("PostgreSQL at %s is unreachable", settings.postgres_host)
            raise SystemExit(1) from None
    yield

    logger.info("Tally API stopping")
    if get_rest_client.cache_info().currsize:
        await get_rest_client().aclose()
        get_rest_client.cache_clear()
    await engine.dispose()


def create_v1_router() -> APIRouter:
    router = APIRouter()
    router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; ``settings`` replaces the environment (tests).

    The passed settings drive the app options, the lifespan and every
    request's analytics factory. The engine and the PostgREST client are
    process singletons and always come from the environment.
    """
    configure_logging()
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Personal finance **analytics**: trends, forecasts and insights.",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "api_versions": ["v1"],
            "data_source": settings.data_source,
        }

    return app


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tally.presentation.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
