"""Factory for user-scoped analytics collaborators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tally.domain.analytics.value_objects import AnalyticsPolicy
from tally.infrastructure.integration.rest import PostgrestAnalyticsDataAdapter
from tally.infrastructure.persistence.sqlalchemy.adapters.analytics import (
    SqlAlchemyAnalyticsDataAdapter,
    SqlAlchemyComputedAlertSink,
)
from tally_config.settings import Settings, get_settings

if TYPE_CHECKING:
    import httpx
    from sqlalchemy.ext.asyncio import AsyncSession

    from tally.application.context import UserContext
    from tally.application.ports.analytics import AnalyticsDataPort

logger = logging.getLogger(__name__)


def policy_from_settings(settings: Settings) -> AnalyticsPolicy:
    """Default policy with the ``ANALYTICS_*`` overrides applied."""
    return AnalyticsPolicy.from_overrides(
        stable_threshold_pct=settings.analytics_stable_threshold_pct,
        budget_warning_pct=settings.analytics_budget_warning_pct,
        budget_exceeded_pct=settings.analytics_budget_exceeded_pct,
        forecast_window=settings.analytics_forecast_window_months,
        forecast_horizon=settings.analytics_forecast_horizon_months,
        range_multiplier=settings.analytics_forecast_range_multiplier,
        seasonal_factors=settings.seasonal_factors,
        top_categories=settings.analytics_top_categories,
    )


class SQLAlchemyAnalyticsFactory:
    """SQLAlchemy implementation of the AnalyticsFactory Protocol.

    Rows come from the database or, with ``DATA_SOURCE=rest``, from the
    PostgREST endpoint. Computed alerts are only written back when reading
    from the database.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_context: UserContext,
        settings: Settings | None = None,
        rest_client: httpx.AsyncClient | None = None,
    ):
        self._session = session
        self._user_context = user_context
        self._settings = settings or get_settings()
        self._rest_client = rest_client

        # Cached instances (created on demand)
        self._data_port: AnalyticsDataPort | None = None
        self._alert_sink: SqlAlchemyComputedAlertSink | None = None
        self._policy: AnalyticsPolicy | None = None

    @property
    def user_context(self) -> UserContext:
        return self._user_context

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def uses_database(self) -> bool:
        return self._settings.data_source == "postgres"

    def analytics_data_port(self) -> AnalyticsDataPort:
        if self._data_port is None:
            if self.uses_database:
                self._data_port = SqlAlchemyAnalyticsDataAdapter(self._session)
            else:
                api_key = self._settings.rest_api_key
                self._data_port = PostgrestAnalyticsDataAdapter(
                    base_url=self._settings.rest_url,
                    api_key=api_key.get_secret_value() if api_key else None,
                    timeout=self._settings.rest_timeout,
                    client=self._rest_client,
                )
            logger.debug(
                "Analytics data source for %s: %s",
                self._user_context,
                self._settings.data_source,
            )
        return self._data_port

    def computed_alert_sink(self) -> SqlAlchemyComputedAlertSink | None:
        if not self.uses_database:
            return None
        if self._alert_sink is None:
            self._alert_sink = SqlAlchemyComputedAlertSink(self._session)
        return self._alert_sink

    def analytics_policy(self) -> AnalyticsPolicy:
        if self._policy is None:
            self._policy = policy_from_settings(self._settings)
        return self._policy
