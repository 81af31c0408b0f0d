"""Application layer: use cases orchestrating ports and domain services."""
