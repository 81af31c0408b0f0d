"""Request-scoped context objects."""

from tally.application.context.user_context import UserContext

__all__ = ["UserContext"]
