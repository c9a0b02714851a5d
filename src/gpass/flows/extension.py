"""
Extension lookup flow.

Runs once per popup open:

    IDLE -> READING_TAB -> NORMALIZING -> QUERYING -> RENDERED | FAILED

A lookup with zero matches is RENDERED with ``LookupOutcome.NO_MATCH``; only
a missing tab or a transport/protocol failure ends in FAILED.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from ..client import CredentialClient
from ..errors import GPassError, NoActiveTab
from ..models import Credential
from ..normalize import normalize

logger = logging.getLogger(__name__)


class LookupState(str, Enum):
    IDLE = "idle"
    READING_TAB = "reading_tab"
    NORMALIZING = "normalizing"
    QUERYING = "querying"
    RENDERED = "rendered"
    FAILED = "failed"


class LookupOutcome(str, Enum):
    MATCHES = "matches"
    NO_MATCH = "no_match"
    NO_ACTIVE_TAB = "no_active_tab"
    ERROR = "error"


@runtime_checkable
class TabSource(Protocol):
    """The host browser: URL of the active tab in the current window, or None."""

    async def active_tab_url(self) -> str | None: ...


class StaticTabSource:
    """A TabSource that always reports the same URL (CLI and tool callers)."""

    def __init__(self, url: str | None):
        self._url = url

    async def active_tab_url(self) -> str | None:
        return self._url


@dataclass(frozen=True)
class LookupResult:
    """What the popup renders once the flow terminates."""

    state: LookupState
    key: str = ""
    credentials: tuple[Credential, ...] = ()
    error: GPassError | None = None

    @property
    def outcome(self) -> LookupOutcome:
        if isinstance(self.error, NoActiveTab):
            return LookupOutcome.NO_ACTIVE_TAB
        if self.error is not None:
            return LookupOutcome.ERROR
        if not self.credentials:
            return LookupOutcome.NO_MATCH
        return LookupOutcome.MATCHES


class ExtensionLookupFlow:
    """One-shot lookup of the logins matching the active tab's domain."""

    def __init__(
        self,
        client: CredentialClient,
        tabs: TabSource,
        render: Callable[[LookupResult], None] | None = None,
    ):
        self._client = client
        self._tabs = tabs
        self._render = render
        self._state = LookupState.IDLE

    @property
    def state(self) -> LookupState:
        return self._state

    def _enter(self, state: LookupState) -> None:
        logger.debug("Lookup %s -> %s", self._state.value, state.value)
        self._state = state

    async def run(self) -> LookupResult:
        """
        Execute the flow and hand the result to ``render``.

        Raises:
            RuntimeError: If the flow has already been run.
        """
        if self._state is not LookupState.IDLE:
            raise RuntimeError("ExtensionLookupFlow runs once; create a new flow per popup open")

        key = ""
        try:
            self._enter(LookupState.READING_TAB)
            url = await self._tabs.active_tab_url()
            if not url:
                raise NoActiveTab("No active tab in the current window")

            self._enter(LookupState.NORMALIZING)
            key = normalize(url)

            self._enter(LookupState.QUERYING)
            # An empty Search is unfiltered on the store; never list everything.
            matches = await self._client.list_by_key(key) if key else ()
        except GPassError as e:
            logger.info("Lookup failed for key %r: %s", key, e)
            self._enter(LookupState.FAILED)
            result = LookupResult(state=LookupState.FAILED, key=key, error=e)
        else:
            self._enter(LookupState.RENDERED)
            result = LookupResult(state=LookupState.RENDERED, key=key, credentials=matches)

        if self._render is not None:
            self._render(result)
        return result
