"""Domain layer: pure analytics logic and value objects."""
