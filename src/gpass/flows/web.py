"""
Web sync flow.

A page session bound to a CredentialCache. Mounting subscribes the table view
and triggers the first revalidation; unmounting unsubscribes. Creating a login
goes to the backend first and only shows up after the follow-up revalidation
resolves; the cache is never patched locally.

Usage:
    async with WebSyncFlow(client, cache, on_change=redraw) as flow:
        flow.set_filter("github")
        await flow.create(NewCredential(url="https://github.com", username="me"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..cache import CredentialCache
from ..client import CredentialClient
from ..errors import GPassError
from ..models import CollectionSnapshot, Credential, NewCredential

logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    ASCEND = "ascend"
    DESCEND = "descend"


class TableView:
    """
    Filtered, sorted projection of a snapshot.

    Never mutates the snapshot; ``rows`` is re-derived whenever the snapshot,
    the filter text or the sort order changes.
    """

    def __init__(self) -> None:
        self._snapshot: CollectionSnapshot = ()
        self._filter = ""
        self._sort: SortOrder | None = None
        self._rows: tuple[Credential, ...] = ()

    @property
    def rows(self) -> tuple[Credential, ...]:
        return self._rows

    @property
    def filter_text(self) -> str:
        return self._filter

    @property
    def sort_order(self) -> SortOrder | None:
        return self._sort

    def on_snapshot(self, snapshot: CollectionSnapshot) -> None:
        self._snapshot = snapshot
        self._derive()

    def set_filter(self, text: str) -> None:
        self._filter = text or ""
        self._derive()

    def set_sort(self, order: SortOrder | None) -> None:
        self._sort = order
        self._derive()

    def _derive(self) -> None:
        rows = [c for c in self._snapshot if c.matches(self._filter)]
        if self._sort is not None:
            rows.sort(
                key=lambda c: (c.url.casefold(), c.url),
                reverse=self._sort is SortOrder.DESCEND,
            )
        self._rows = tuple(rows)


@dataclass
class CreateForm:
    """State of the new-login form."""

    open: bool = False
    submitting: bool = False
    error: str = ""

    def validate(self, record: NewCredential) -> str:
        """Return an error message, or "" if the record can be submitted."""
        if not record.url.strip():
            return "URL is required"
        if not record.username.strip():
            return "Username is required"
        return ""


class WebSyncFlow:
    """Binds a table view and a create form to a shared CredentialCache."""

    def __init__(
        self,
        client: CredentialClient,
        cache: CredentialCache,
        on_change: Callable[[WebSyncFlow], None] | None = None,
    ):
        self._client = client
        self._cache = cache
        self._on_change = on_change
        self.table = TableView()
        self.form = CreateForm()
        self.last_error: GPassError | None = None
        self._mounted = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def loading(self) -> bool:
        return self._cache.is_loading()

    @property
    def rows(self) -> tuple[Credential, ...]:
        return self.table.rows

    async def mount(self) -> None:
        """Subscribe to the cache and run the initial revalidation."""
        if self._mounted:
            return
        self._cache.subscribe(self._on_snapshot)
        self._mounted = True
        self.table.on_snapshot(self._cache.read())
        try:
            await self._cache.revalidate()
        except GPassError as e:
            self._report(e)

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._cache.unsubscribe(self._on_snapshot)
        self._mounted = False

    async def __aenter__(self) -> WebSyncFlow:
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.unmount()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def refresh(self) -> CollectionSnapshot:
        """
        Revalidate on user request.

        Raises:
            TransportError, ProtocolError: The refresh failed; the table keeps
                showing the previous snapshot.
        """
        return await self._cache.revalidate()

    def set_filter(self, text: str) -> None:
        self.table.set_filter(text)
        self._changed()

    def set_sort(self, order: SortOrder | None) -> None:
        self.table.set_sort(order)
        self._changed()

    def open_form(self) -> None:
        self.form = CreateForm(open=True)
        self._changed()

    def close_form(self) -> None:
        self.form = CreateForm()
        self._changed()

    async def create(self, record: NewCredential) -> Credential | None:
        """
        Submit a new login, then force a revalidation so the table picks it up.

        On failure the error is stored on ``form.error``, the form stays open
        and None is returned. The new row is not visible until the
        revalidation resolves.
        """
        problem = self.form.validate(record)
        if problem:
            self.form.error = problem
            self._changed()
            return None

        self.form.submitting = True
        self.form.error = ""
        self._changed()
        try:
            created = await self._client.create(record)
        except GPassError as e:
            logger.info("Create failed for %s: %s", record.url, e)
            self.form.submitting = False
            self.form.error = str(e)
            self._changed()
            return None

        self.form = CreateForm()
        self._changed()
        try:
            await self._cache.revalidate(fresh=True)
        except GPassError as e:
            self._report(e)
        return created

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_snapshot(self, snapshot: CollectionSnapshot) -> None:
        self.last_error = None
        self.table.on_snapshot(snapshot)
        self._changed()

    def _report(self, error: GPassError) -> None:
        logger.warning("Revalidation failed: %s", error)
        self.last_error = error
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
