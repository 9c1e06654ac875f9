"""
Scoped Purge Engine Module.

Predicate building, sequential execution and result reporting.
"""

__all__ = [
    "CancellationToken",
    "DeletePredicate",
    "PurgeEngine",
    "PurgeExecutor",
    "ResultReporter",
    "build_all_rows_predicate",
]

from scoped_purge.engine.predicates import DeletePredicate, build_all_rows_predicate
from scoped_purge.engine.executor import CancellationToken, PurgeEngine, PurgeExecutor
from scoped_purge.engine.reporter import ResultReporter
