"""Evaluate alert rules for a user and write the results back."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

from tally.application.dtos.analytics import AlertsResult
from tally.application.ports.analytics import ComputedAlertSink
from tally.application.services import AnalyticsDataLoader
from tally.domain.analytics.services import (
    HistoricalAnalyticsService,
    TemporalBucketingService,
    insight_rules,
)
from tally.domain.analytics.value_objects import (
    BudgetRecord,
    GoalRecord,
    Insight,
    TimeBucket,
)
from tally.domain.analytics.value_objects.time_bucket import ZERO

if TYPE_CHECKING:
    from tally.application.factories import AnalyticsFactory

logger = logging.getLogger(__name__)

# Months of per-category history the surge rule compares against
SURGE_HISTORY_MONTHS = 6
# Months averaged for the savings rate and goal contributions
SAVINGS_MONTHS = 3

_SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


class GenerateAlertsCommand:
    """Compute budget, surge, savings and goal alerts.

    Persisting the alerts is best-effort: a failing sink is logged and the
    computed alerts are still returned.
    """

    def __init__(
        self,
        loader: AnalyticsDataLoader,
        alert_sink: ComputedAlertSink | None = None,
    ):
        self._loader = loader
        self._sink = alert_sink

    @classmethod
    def from_factory(cls, factory: AnalyticsFactory) -> GenerateAlertsCommand:
        return cls(
            loader=AnalyticsDataLoader.from_factory(factory),
            alert_sink=factory.computed_alert_sink(),
        )

    async def execute(self, persist: bool = True) -> AlertsResult:
        today = self._loader.user.today()
        window = HistoricalAnalyticsService.window(today, SURGE_HISTORY_MONTHS)
        transactions = await self._loader.transactions(window)
        budgets = await self._loader.budgets()
        goals = await self._loader.goals()

        months = TemporalBucketingService.trailing_months(
            transactions.records, SURGE_HISTORY_MONTHS, today
        )
        alerts: list[Insight] = []
        alerts.extend(self._budget_alerts(budgets.records, months[-1], today))
        alerts.extend(self._surge_alerts(months))

        recent = months[-SAVINGS_MONTHS:]
        income = sum((m.total_income for m in recent), ZERO)
        expense = sum((m.total_expense for m in recent), ZERO)
        savings = insight_rules.evaluate_savings_rate(
            income,
            expense,
            months=SAVINGS_MONTHS,
            policy=self._loader.policy,
            currency=self._loader.user.currency,
        )
        if savings is not None:
            alerts.append(savings)

        monthly_savings = (income - expense) / SAVINGS_MONTHS
        alerts.extend(self._goal_alerts(goals.records, monthly_savings, today))

        alerts.sort(key=lambda a: (_SEVERITY_ORDER[a.severity.value], a.key))
        persisted = False
        if persist and alerts:
            persisted = await self._persist(alerts)
        return AlertsResult(alerts=alerts, persisted=persisted)

    def _budget_alerts(
        self,
        budgets: Sequence[BudgetRecord],
        this_month: TimeBucket,
        today: date,
    ) -> list[Insight]:
        alerts = []
        for budget in budgets:
            stat = this_month.category_breakdown.get(budget.category_name)
            alert = insight_rules.evaluate_budget_risk(
                budget,
                stat.amount if stat else ZERO,
                today,
                policy=self._loader.policy,
                currency=self._loader.user.currency,
            )
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _surge_alerts(self, months: Sequence[TimeBucket]) -> list[Insight]:
        histories: dict[str, list[Decimal]] = defaultdict(
            lambda: [ZERO] * len(months)
        )
        for index, bucket in enumerate(months):
            for name, stat in bucket.category_breakdown.items():
                histories[name][index] = stat.amount

        alerts = []
        for name in sorted(histories):
            # Months before the category first appeared are not history
            amounts = histories[name]
            first = next(
                (i for i, amount in enumerate(amounts) if amount > 0), len(amounts)
            )
            alert = insight_rules.detect_category_surge(
                name,
                amounts[first:],
                policy=self._loader.policy,
                currency=self._loader.user.currency,
            )
            if alert is not None:
                alerts.append(alert)
        return alerts

    def _goal_alerts(
        self,
        goals: Sequence[GoalRecord],
        monthly_savings: Decimal,
        today: date,
    ) -> list[Insight]:
        alerts = []
        for goal in goals:
            alert = insight_rules.evaluate_goal_timeline(
                goal,
                monthly_savings,
                today,
                currency=self._loader.user.currency,
            )
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def _persist(self, alerts: list[Insight]) -> bool:
        if self._sink is None:
            return False
        try:
            await self._sink.persist_computed_alerts(self._loader.user.user_id, alerts)
        except Exception as e:
            logger.warning(
                "Could not persist %d computed alert(s) for user %s: %s",
                len(alerts),
                self._loader.user.user_id,
                e,
            )
            return False
        return True
