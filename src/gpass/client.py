"""
GPass Client - authenticated transport to the GPass login store.

Endpoints:
- GET  /logins/              -> {"Data": [...], "TotalData": n, "FilteredData": m}
- GET  /logins/?Search=<key> -> same envelope, filtered server-side
- POST /logins/              -> the created login

Errors are never retried here; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .config import GPassConfig
from .credentials import CredentialProvider
from .errors import ProtocolError, TransportError
from .models import CollectionSnapshot, Credential, LoginPage, NewCredential

logger = logging.getLogger(__name__)

LOGINS_PATH = "/logins/"


class CredentialClient:
    """Async client wrapping the GPass logins API."""

    def __init__(
        self,
        config: GPassConfig,
        credentials: CredentialProvider,
        http: httpx.AsyncClient | None = None,
    ):
        self._config = config
        self._credentials = credentials
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=config.timeout)

    @property
    def config(self) -> GPassConfig:
        return self._config

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._credentials.authorization_header(),
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> CredentialClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list(self) -> CollectionSnapshot:
        """Fetch the entire collection, following pages until exhausted."""
        return await self._fetch_all({})

    async def list_by_key(self, key: str) -> tuple[Credential, ...]:
        """
        Fetch the logins the store matches against ``key``.

        Matching happens server-side (the reference store does a substring
        match over url, username and password); results are not re-filtered.
        """
        return await self._fetch_all({"Search": key})

    async def create(self, record: NewCredential) -> Credential:
        """Submit a new login and return it with its server-assigned identity."""
        body = await self._request("POST", LOGINS_PATH, json=record.to_wire())
        if not isinstance(body, dict):
            raise ProtocolError(f"Expected a login object, got {type(body).__name__}")
        try:
            created = Credential.model_validate(body)
        except ValidationError as e:
            raise ProtocolError(f"Malformed login in create response: {e}") from e
        logger.info("Created login %s for %s", created.id, created.url)
        return created

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fetch_all(self, params: dict[str, Any]) -> tuple[Credential, ...]:
        """
        Collect every page of ``GET /logins/``.

        Stops on a short page, once ``FilteredData`` rows have been read, or
        when a page brings no unseen ids. An envelope without ``FilteredData``
        comes from a store that does not page and is taken as the whole
        collection. Rows are keyed by id and the first
        copy is kept.
        """
        page_size = self._config.page_size
        collected: dict[int | str, Credential] = {}
        offset = 0
        while True:
            page = await self._fetch_page({**params, "Limit": page_size, "Offset": offset})
            before = len(collected)
            for credential in page.data:
                collected.setdefault(credential.id, credential)
            offset += len(page.data)
            if len(page.data) < page_size or page.filtered_data is None:
                break
            if offset >= page.filtered_data:
                break
            if len(collected) == before:
                logger.warning("Page at offset %d repeated known logins, stopping", offset)
                break
        return tuple(collected.values())

    async def _fetch_page(self, params: dict[str, Any]) -> LoginPage:
        body = await self._request("GET", LOGINS_PATH, params=params)
        if not isinstance(body, dict):
            raise ProtocolError(f"Expected a login envelope, got {type(body).__name__}")
        if "Data" not in body:
            raise ProtocolError("Login envelope is missing 'Data'")
        try:
            return LoginPage.model_validate(body)
        except ValidationError as e:
            raise ProtocolError(f"Malformed login envelope: {e}") from e

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._config.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, kwargs.get("params"))
        try:
            response = await self._http.request(method, url, headers=self._headers, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {method} {path}", cause=e) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", cause=e) from e
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Decode a backend response, mapping failures to ProtocolError."""
        if not 200 <= response.status_code < 300:
            try:
                data = response.json()
                message = data.get("message", response.text)
            except Exception:
                message = response.text
            raise ProtocolError(
                f"HTTP {response.status_code}: {message}", status_code=response.status_code
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(
                "Response is not valid JSON", status_code=response.status_code
            ) from e
