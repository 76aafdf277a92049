"""Route group exports."""

from . import health, optimization, routes

__all__ = ["optimization", "routes", "health"]
