"""Typed records read from the external store.

These are the only shapes the bucketing, trend and forecast stages ever see.
Raw rows are turned into records by the ingestion normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, Iterator, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

UNCATEGORIZED = "Uncategorized"

# Average number of weeks in a calendar month
WEEKS_PER_MONTH = Decimal("4.33")
MONTHS_PER_YEAR = Decimal(12)


def _coerce_decimal(v: Any) -> Decimal:
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


class TransactionType(str, Enum):
    """Direction of a transaction; amounts themselves are never signed."""

    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """Budget periods supported by the budgets table."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def to_monthly(self, amount: Decimal) -> Decimal:
        """Convert an amount for this period to its monthly equivalent."""
        if self is BudgetPeriod.WEEKLY:
            return amount * WEEKS_PER_MONTH
        if self is BudgetPeriod.YEARLY:
            return amount / MONTHS_PER_YEAR
        return amount


class TransactionRecord(BaseModel):
    """A single income or expense transaction."""

    id: str
    user_id: str
    type: TransactionType
    category_name: str = UNCATEGORIZED
    amount: Decimal
    date: date

    model_config = ConfigDict(frozen=True)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        amount = _coerce_decimal(v)
        if amount < 0:
            msg = "Transaction amount must not be negative"
            raise ValueError(msg)
        return amount

    @field_validator("category_name", mode="before")
    @classmethod
    def validate_category_name(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return UNCATEGORIZED
        return str(v).strip()

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME


class BudgetRecord(BaseModel):
    """A spending limit for one category over a period."""

    id: str
    user_id: str
    category_name: str = UNCATEGORIZED
    amount: Decimal
    period: BudgetPeriod = BudgetPeriod.MONTHLY

    model_config = ConfigDict(frozen=True)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        amount = _coerce_decimal(v)
        if amount <= 0:
            msg = "Budget amount must be positive"
            raise ValueError(msg)
        return amount

    @field_validator("category_name", mode="before")
    @classmethod
    def validate_category_name(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return UNCATEGORIZED
        return str(v).strip()

    @property
    def monthly_amount(self) -> Decimal:
        return self.period.to_monthly(self.amount)


class GoalRecord(BaseModel):
    """A savings goal with a deadline."""

    id: str
    user_id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: date

    model_config = ConfigDict(frozen=True)

    @field_validator("target_amount", mode="before")
    @classmethod
    def validate_target_amount(cls, v: Any) -> Decimal:
        amount = _coerce_decimal(v)
        if amount <= 0:
            msg = "Goal target amount must be positive"
            raise ValueError(msg)
        return amount

    @field_validator("current_amount", mode="before")
    @classmethod
    def validate_current_amount(cls, v: Any) -> Decimal:
        amount = _coerce_decimal(v if v is not None else 0)
        if amount < 0:
            msg = "Goal current amount must not be negative"
            raise ValueError(msg)
        return amount

    @property
    def remaining_amount(self) -> Decimal:
        return max(Decimal("0"), self.target_amount - self.current_amount)

    @property
    def progress_percentage(self) -> Decimal:
        return self.current_amount / self.target_amount * 100


RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date window."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            msg = f"Date range end {self.end} is before start {self.start}"
            raise ValueError(msg)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class RecordBatch(Generic[RecordT]):
    """Normalized records plus the number of raw rows that were rejected."""

    records: tuple[RecordT, ...] = ()
    skipped: int = 0
    errors: tuple[str, ...] = field(default=(), repr=False)

    @classmethod
    def of(cls, records: Sequence[RecordT], skipped: int = 0) -> RecordBatch[RecordT]:
        return cls(records=tuple(records), skipped=skipped)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)
