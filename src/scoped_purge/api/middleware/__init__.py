"""
API middleware.
"""

from scoped_purge.api.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
