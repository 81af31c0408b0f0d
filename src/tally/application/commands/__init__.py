"""Use cases with side effects."""
