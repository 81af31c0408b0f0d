"""Application ports (interfaces implemented by infrastructure)."""
