"""SQLAlchemy models for persistence layer."""

from tally.infrastructure.persistence.sqlalchemy.models.analytics import (
    BudgetModel,
    CategoryModel,
    ComputedAlertModel,
    GoalModel,
    TransactionModel,
)
from tally.infrastructure.persistence.sqlalchemy.models.base import Base

__all__ = [
    "Base",
    "BudgetModel",
    "CategoryModel",
    "ComputedAlertModel",
    "GoalModel",
    "TransactionModel",
]
