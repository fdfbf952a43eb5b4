"""Router exports for the catalog read API."""
from . import health, shows

__all__ = ["health", "shows"]
