"""
Credential Cache.

Holds the last known snapshot of the whole login collection for every view
in a session. At most one ``list()`` call is in flight at a time: callers of
``revalidate()`` that arrive while a fetch is pending join it and observe the
same snapshot (or the same error).

Usage:
    cache = CredentialCache(client)
    cache.subscribe(on_snapshot)

    snapshot = await cache.revalidate()     # raises on failure
    rows = cache.read()                     # never blocks
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from .client import CredentialClient
from .models import CollectionSnapshot

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[CollectionSnapshot], None]


class CredentialCache:
    """
    Process-local cache of the login collection with coalesced revalidation.

    The snapshot is only ever replaced whole, on a successful fetch. A failed
    fetch leaves it untouched and raises only to the callers awaiting
    ``revalidate()``; subscribers are not told about failures.
    """

    def __init__(self, client: CredentialClient) -> None:
        self._client = client
        self._snapshot: CollectionSnapshot = ()
        self._inflight: asyncio.Task[CollectionSnapshot] | None = None
        self._subscribers: list[SnapshotCallback] = []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self) -> CollectionSnapshot:
        """Return the last known snapshot, or ``()`` before the first load."""
        return self._snapshot

    def is_loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: SnapshotCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: SnapshotCallback) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Revalidation
    # ------------------------------------------------------------------

    async def revalidate(self, *, fresh: bool = False) -> CollectionSnapshot:
        """
        Refresh the snapshot from the backend.

        Args:
            fresh: Require a fetch that starts after this call. If one is
                already in flight it is allowed to finish first (its result
                may predate a mutation the caller just made), then a new
                fetch is started or joined. Still at most one in flight.

        Returns:
            The snapshot produced by the fetch this call joined.

        Raises:
            TransportError, ProtocolError: If that fetch failed. The previous
                snapshot stays in place.
        """
        if fresh and self.is_loading():
            stale = self._inflight
            # Its outcome is superseded by the fetch below.
            with contextlib.suppress(Exception):
                await asyncio.shield(stale)
        return await asyncio.shield(self._join_or_start())

    def _join_or_start(self) -> asyncio.Task[CollectionSnapshot]:
        if self.is_loading():
            logger.debug("Joining in-flight collection fetch")
            return self._inflight
        task = asyncio.ensure_future(self._fetch())
        task.add_done_callback(self._on_fetch_done)
        self._inflight = task
        return task

    async def _fetch(self) -> CollectionSnapshot:
        snapshot = await self._client.list()
        self._replace(snapshot)
        return snapshot

    def _on_fetch_done(self, task: asyncio.Task[CollectionSnapshot]) -> None:
        if self._inflight is task:
            self._inflight = None
        if task.cancelled():
            return
        # Retrieve the exception so a fetch nobody awaits any more does not warn.
        error = task.exception()
        if error is not None:
            logger.warning("Collection revalidation failed, keeping stale snapshot: %s", error)

    def _replace(self, snapshot: CollectionSnapshot) -> None:
        self._snapshot = tuple(snapshot)
        logger.info("Credential snapshot replaced (%d logins)", len(self._snapshot))
        for callback in list(self._subscribers):
            try:
                callback(self._snapshot)
            except Exception:
                logger.warning("Snapshot subscriber %r failed", callback, exc_info=True)
