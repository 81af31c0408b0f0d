"""Tally: personal finance analytics."""
