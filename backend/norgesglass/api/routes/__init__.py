"""
API routes.
"""

from norgesglass.api.routes import geology, health, hydrology, stores

__all__ = ["geology", "health", "hydrology", "stores"]
