"""Insight and alert records produced by the rule functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from tally.domain.analytics.value_objects.trend import TrendResult


class InsightType(str, Enum):
    TREND = "trend"
    FORECAST = "forecast"
    ALERT = "alert"
    RECOMMENDATION = "recommendation"
    OPPORTUNITY = "opportunity"
    BUDGET_WARNING = "budget_warning"
    SPENDING_ANOMALY = "spending_anomaly"
    GOAL_RISK = "goal_risk"
    SPENDING_PATTERN = "spending_pattern"
    BUDGET_EFFICIENCY = "budget_efficiency"
    CATEGORY_TREND = "category_trend"
    SEASONAL_PATTERN = "seasonal_pattern"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Insight:
    """A user-facing statement derived from aggregated numbers.

    Alerts are insights carrying a ``severity``; ``key`` identifies the
    alert across recomputations so persisted copies can be overwritten.
    """

    type: InsightType
    category: str
    title: str
    description: str
    confidence: int  # 0-100
    impact: Impact
    timeframe: str
    key: str = ""
    severity: AlertSeverity | None = None
    value: Decimal | None = None
    change: Decimal | None = None
    recommendation: str | None = None
    action_required: bool = False
    suggested_actions: tuple[str, ...] = ()
    trend: TrendResult | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True)
class SpendingInsights:
    """Plain-text year-over-year findings."""

    trends: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    alerts: tuple[str, ...] = ()
