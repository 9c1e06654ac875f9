"""
Scoped Purge - dependency-ordered, fail-fast data purging.

Deletes a named scope of entities from a relational store, children before
parents, stopping at the first failure and reporting exactly how far it got.
"""

__version__ = "0.1.0"

# API module is available but not exported by default
# Import explicitly: from scoped_purge.api import create_app

__all__ = []
