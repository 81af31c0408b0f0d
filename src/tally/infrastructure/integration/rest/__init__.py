"""PostgREST data source."""

from tally.infrastructure.integration.rest.postgrest_analytics_data_adapter import (
    PostgrestAnalyticsDataAdapter,
)

__all__ = ["PostgrestAnalyticsDataAdapter"]
