"""
API route handlers.
"""

from scoped_purge.api.routes import health, purge

__all__ = ["health", "purge"]
