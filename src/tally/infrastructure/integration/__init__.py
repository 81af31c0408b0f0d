"""Integrations with external HTTP services."""
