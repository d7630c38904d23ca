"""Route group exports."""

from . import health, revisits, routes

__all__ = ["health", "revisits", "routes"]
