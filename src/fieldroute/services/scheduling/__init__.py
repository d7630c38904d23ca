"""Revisit cadence scheduling."""
