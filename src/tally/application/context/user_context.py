"""User context for request-scoped user identity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class UserContext:
    """
    Immutable context for the user an analytics call runs for.

    Created once per request and passed explicitly to queries and commands.
    The user has already been authorized by the caller; ``currency`` and
    ``timezone`` are display preferences.
    """

    user_id: UUID
    currency: str = "EUR"
    timezone: str = "UTC"

    @classmethod
    def from_values(
        cls,
        user_id: UUID,
        currency: str | None = None,
        timezone: str | None = None,
    ) -> UserContext:
        return cls(
            user_id=user_id,
            currency=currency or "EUR",
            timezone=timezone or "UTC",
        )

    def today(self) -> date:
        """Current calendar date in the user's timezone."""
        return datetime.now(tz=ZoneInfo(self.timezone)).date()

    def __str__(self) -> str:
        return f"UserContext({self.user_id})"
