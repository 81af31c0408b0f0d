"""Request-scoped collaborators for the analytics routes.

Engine, session maker and PostgREST client are process singletons; the
session, the caller's `UserContext` and the analytics factory are built per
request.
"""

import logging
from functools import lru_cache
from typing import Annotated, AsyncGenerator
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tally.application.context import UserContext
from tally.infrastructure.persistence.sqlalchemy.factory import (
    SQLAlchemyAnalyticsFactory,
)
from tally_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return create_async_engine(get_settings().database_url, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_maker()() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


@lru_cache(maxsize=1)
def get_rest_client() -> httpx.AsyncClient:
    """Shared HTTP client for the PostgREST data source, closed on shutdown."""
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.rest_url.rstrip("/"),
        timeout=settings.rest_timeout,
    )


async def get_user_context(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_currency: Annotated[str | None, Header()] = None,
    x_user_timezone: Annotated[str | None, Header()] = None,
) -> UserContext:
    """
    Build the UserContext from the identity headers.

    The caller (gateway) has already authenticated and authorized the user;
    this service only scopes its reads to the given id.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    try:
        user_id = UUID(x_user_id)
    except ValueError as e:
        logger.warning("Rejected malformed X-User-Id header: %s", x_user_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id must be a UUID",
        ) from e

    if x_user_timezone:
        try:
            ZoneInfo(x_user_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown timezone '{x_user_timezone}'",
            ) from e

    return UserContext.from_values(
        user_id=user_id,
        currency=x_user_currency.upper() if x_user_currency else None,
        timezone=x_user_timezone,
    )


CurrentUserContext = Annotated[UserContext, Depends(get_user_context)]


async def get_analytics_factory(
    session: DBSession,
    user_context: CurrentUserContext,
    settings: AppSettings,
) -> SQLAlchemyAnalyticsFactory:
    """Ports for the configured data source, scoped to the caller."""
    return SQLAlchemyAnalyticsFactory(
        session=session,
        user_context=user_context,
        settings=settings,
        rest_client=get_rest_client() if settings.data_source == "rest" else None,
    )


AnalyticsFactoryDep = Annotated[
    SQLAlchemyAnalyticsFactory,
    Depends(get_analytics_factory),
]
