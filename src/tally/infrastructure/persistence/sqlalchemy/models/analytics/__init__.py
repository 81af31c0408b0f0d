"""Analytics SQLAlchemy models."""

from tally.infrastructure.persistence.sqlalchemy.models.analytics.budget_model import (
    BudgetModel,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics.category_model import (  # NOQA: E501
    CategoryModel,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics.computed_alert_model import (  # NOQA: E501
    ComputedAlertModel,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics.goal_model import (
    GoalModel,
)
from tally.infrastructure.persistence.sqlalchemy.models.analytics.transaction_model import (  # NOQA: E501
    TransactionModel,
)

__all__ = [
    "BudgetModel",
    "CategoryModel",
    "ComputedAlertModel",
    "GoalModel",
    "TransactionModel",
]
