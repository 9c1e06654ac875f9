"""
Scoped Purge API Module.

REST API exposing scope listing and purge execution.
"""

from scoped_purge.api.app import create_app

__all__ = ["create_app"]
