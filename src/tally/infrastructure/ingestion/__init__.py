"""Raw row ingestion."""

from tally.infrastructure.ingestion.row_normalizer import (
    extract_category_name,
    normalize_budget_row,
    normalize_budgets,
    normalize_goal_row,
    normalize_goals,
    normalize_rows,
    normalize_transaction_row,
    normalize_transactions,
)

__all__ = [
    "extract_category_name",
    "normalize_budget_row",
    "normalize_budgets",
    "normalize_goal_row",
    "normalize_goals",
    "normalize_rows",
    "normalize_transaction_row",
    "normalize_transactions",
]
