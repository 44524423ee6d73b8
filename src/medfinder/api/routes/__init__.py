"""Route group exports."""

from . import health, location, medicines, shops

__all__ = ["health", "location", "medicines", "shops"]
