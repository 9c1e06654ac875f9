"""
Purge Executor - deletes a resolved entity order against a store.

Entities are deleted one at a time, strictly in order. The first failure
stops the run; the result carries the failed entity, the store's error and
the prefix of entities already purged. Re-running the same scope is the
recovery path: purged entities are empty and their delete is a no-op.
"""

import logging
import threading
import time
from collections.abc import Callable, Sequence

from scoped_purge.core.exceptions import (
    ProtectedEntityError,
    PurgeCancelledError,
    StoreDeleteError,
    UnknownScopeError,
)
from scoped_purge.core.models import Entity, PurgeResult, PurgeStatus, utc_timestamp
from scoped_purge.engine.predicates import build_all_rows_predicate
from scoped_purge.registry.graph import EntityGraph
from scoped_purge.registry.scopes import ScopeResolver
from scoped_purge.stores.base import PurgeStore

logger = logging.getLogger(__name__)

AD_HOC_SCOPE = "<ad-hoc>"


class CancellationToken:
    """
    Request-level cancellation, checked between entities only.

    An in-flight delete is never interrupted.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._deadline = clock() + timeout_seconds if timeout_seconds is not None else None
        self._event = threading.Event()
        self._reason: str | None = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Request cancellation before the next entity starts."""
        self._reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def reason(self) -> str | None:
        """Why the token is cancelled, if it is."""
        if self._event.is_set():
            return self._reason
        if self.is_cancelled:
            return "request deadline exceeded"
        return None


class PurgeExecutor:
    """Sequential, fail-fast deletion of an ordered entity list."""

    def __init__(
        self,
        store: PurgeStore,
        on_entity_complete: Callable[[str, int | None], None] | None = None,
    ):
        """
        Initialize the executor.

        Args:
            store: Store adapter offering delete(entity_name, predicate)
            on_entity_complete: Optional callback after each purged entity
        """
        self._store = store
        self._on_entity_complete = on_entity_complete

    def execute(
        self,
        ordered_entities: Sequence[Entity],
        scope: str = AD_HOC_SCOPE,
        token: CancellationToken | None = None,
    ) -> PurgeResult:
        """
        Delete every entity in ``ordered_entities``, stopping at the first failure.

        Args:
            ordered_entities: Entities already in FK-safe order
            scope: Scope name reported in the result
            token: Optional cancellation token checked between entities

        Returns:
            PurgeResult with status and the purged prefix

        Raises:
            ProtectedEntityError: If a protected entity was passed in
        """
        for entity in ordered_entities:
            if entity.protected:
                raise ProtectedEntityError(
                    f"Refusing to purge protected entity '{entity.name}'",
                    entity_name=entity.name,
                    scope_name=scope,
                )

        planned = tuple(e.name for e in ordered_entities)
        purged: list[str] = []
        rows_deleted: dict[str, int] = {}
        started_at = utc_timestamp()
        start = time.perf_counter()

        def finish(status: PurgeStatus, failed: str | None = None, error=None) -> PurgeResult:
            return PurgeResult(
                scope=scope,
                status=status,
                entities_purged=tuple(purged),
                planned=planned,
                failed_entity=failed,
                error=error,
                rows_deleted=dict(rows_deleted),
                started_at=started_at,
                finished_at=utc_timestamp(),
                duration_ms=(time.perf_counter() - start) * 1000,
            )

        logger.info(
            f"Purge of scope '{scope}' started: {', '.join(planned) or '(empty)'}",
            extra={"event": "purge_started", "scope": scope, "planned": list(planned)},
        )

        for entity in ordered_entities:
            if token is not None and token.is_cancelled:
                error = PurgeCancelledError(
                    f"Purge cancelled before '{entity.name}': {token.reason}",
                    entity_name=entity.name,
                    reason=token.reason,
                )
                logger.warning(
                    str(error),
                    extra={"event": "purge_cancelled", "scope": scope, "purged": list(purged)},
                )
                return finish(PurgeStatus.CANCELLED, entity.name, error)

            predicate = build_all_rows_predicate(entity)
            try:
                count = self._store.delete(entity.name, predicate)
            except Exception as e:
                error = StoreDeleteError(
                    getattr(e, "message", None) or str(e) or type(e).__name__,
                    entity_name=entity.name,
                    cause=e,
                )
                logger.error(
                    f"Purge of '{entity.name}' failed: {error.message}",
                    extra={
                        "event": "entity_failed",
                        "scope": scope,
                        "entity": entity.name,
                        "purged": list(purged),
                    },
                )
                return finish(PurgeStatus.STORE_FAILED, entity.name, error)

            purged.append(entity.name)
            if isinstance(count, int):
                rows_deleted[entity.name] = count
            logger.info(
                f"Purged '{entity.name}' where {predicate}",
                extra={"event": "entity_purged", "scope": scope, "entity": entity.name, "rows": count},
            )
            if self._on_entity_complete:
                try:
                    self._on_entity_complete(entity.name, count)
                except Exception as e:
                    # The delete already happened; keep reporting it
                    logger.warning(
                        f"Completion callback failed after '{entity.name}': {e}",
                        extra={"event": "callback_failed", "scope": scope, "entity": entity.name},
                    )

        result = finish(PurgeStatus.COMPLETED)
        logger.info(
            f"Purge of scope '{scope}' completed in {result.duration_ms:.0f}ms",
            extra={"event": "purge_completed", "scope": scope, "purged": list(purged)},
        )
        return result


class PurgeEngine:
    """
    Single entry point: purge(scope_name) -> PurgeResult.

    Never raises for unknown scopes, store failures or cancellation; those
    come back as a non-successful PurgeResult. Concurrent purges are not
    coordinated here.
    """

    def __init__(
        self,
        graph: EntityGraph,
        store: PurgeStore,
        timeout_seconds: float | None = None,
        audit_logger=None,
        on_entity_complete: Callable[[str, int | None], None] | None = None,
    ):
        """
        Initialize the engine.

        Args:
            graph: Frozen entity graph built at startup
            store: Store adapter
            timeout_seconds: Default request deadline, checked between entities
            audit_logger: Optional PurgeAuditLogger receiving every result
            on_entity_complete: Optional callback after each purged entity
        """
        self._graph = graph
        self._store = store
        self._resolver = ScopeResolver(graph)
        self._executor = PurgeExecutor(store, on_entity_complete=on_entity_complete)
        self._timeout_seconds = timeout_seconds
        self._audit_logger = audit_logger

    @property
    def graph(self) -> EntityGraph:
        """The entity graph in use."""
        return self._graph

    @property
    def store(self) -> PurgeStore:
        """The store adapter deletes are sent to."""
        return self._store

    @property
    def resolver(self) -> ScopeResolver:
        """The scope resolver in use."""
        return self._resolver

    def plan(self, scope_name: str) -> tuple[Entity, ...]:
        """
        Resolve a scope without deleting anything.

        Raises:
            UnknownScopeError: If the scope is not registered
        """
        return self._resolver.resolve(scope_name)

    def purge(
        self,
        scope_name: str,
        token: CancellationToken | None = None,
        actor: str = "system",
    ) -> PurgeResult:
        """
        Purge every entity of ``scope_name`` in dependency order.

        Args:
            scope_name: Registered scope name
            token: Cancellation token; defaults to one bound to the engine timeout
            actor: Who requested the purge, for the audit trail

        Returns:
            PurgeResult describing success or the first failure
        """
        try:
            ordered = self._resolver.resolve(scope_name)
        except UnknownScopeError as e:
            logger.warning(str(e), extra={"event": "unknown_scope", "scope": scope_name})
            result = PurgeResult(
                scope=scope_name,
                status=PurgeStatus.UNKNOWN_SCOPE,
                error=e,
                finished_at=utc_timestamp(),
                duration_ms=0.0,
            )
            self._audit(result, actor)
            return result

        if token is None:
            token = CancellationToken(self._timeout_seconds)

        result = self._executor.execute(ordered, scope=scope_name, token=token)
        self._audit(result, actor)
        return result

    def _audit(self, result: PurgeResult, actor: str) -> None:
        if self._audit_logger is not None:
            self._audit_logger.record(result, actor=actor)
