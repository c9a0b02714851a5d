"""
GPass Tool - Look up, list and create logins in a GPass store via FastMCP.

Supports:
- Basic-auth credentials (GPASS_USERNAME / GPASS_PASSWORD) from the credential
  store or the environment
- Backend URL from GPASS_API_URL
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from .client import CredentialClient
from .config import GPassConfig
from .credentials import CredentialStore, StoreCredentialProvider, resolve_credentials
from .errors import ConfigError, GPassError
from .flows.extension import ExtensionLookupFlow, LookupOutcome, StaticTabSource
from .models import Credential, NewCredential


def _login_dict(credential: Credential, reveal: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": credential.id,
        "url": credential.url,
        "username": credential.username,
    }
    if reveal:
        data["password"] = credential.reveal()
    return data


def register_tools(
    mcp: FastMCP,
    credentials: CredentialStore | None = None,
    config: GPassConfig | None = None,
) -> None:
    """Register GPass tools with the MCP server."""

    def _get_client() -> CredentialClient | dict[str, str]:
        """Get a GPass client, or return an error dict if not configured."""
        try:
            resolve_credentials(credentials)
            resolved = config or GPassConfig.from_env()
        except ConfigError as e:
            return {
                "error": "GPass credentials not configured",
                "detail": str(e),
                "help": (
                    "Set GPASS_USERNAME and GPASS_PASSWORD environment variables "
                    "or configure them via credential store"
                ),
            }
        return CredentialClient(resolved, StoreCredentialProvider(credentials))

    @mcp.tool()
    async def gpass_lookup(url: str) -> dict:
        """
        Find stored logins for the domain of a page URL.

        Args:
            url: Full page URL (e.g. "https://github.com/login"). Only the
                 host part is used for the lookup.

        Returns:
            Dict with the lookup key, matching logins (with passwords) or error
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        async with client:
            result = await ExtensionLookupFlow(client, StaticTabSource(url)).run()
        if result.error is not None:
            return {"error": str(result.error), "key": result.key}
        return {
            "success": True,
            "key": result.key,
            "matched": result.outcome is LookupOutcome.MATCHES,
            "logins": [_login_dict(c) for c in result.credentials],
        }

    @mcp.tool()
    async def gpass_list_logins(search: str = "", reveal: bool = False) -> dict:
        """
        List stored logins, optionally filtered by the store's search.

        Args:
            search: Substring the store matches against url, username and
                    password. Empty lists everything.
            reveal: Include passwords in the result (default False)

        Returns:
            Dict with list of logins or error
        """
        client = _get_client()
        if isinstance(client, dict):
            return client
        try:
            async with client:
                logins = await (client.list_by_key(search) if search else client.list())
        except GPassError as e:
            return {"error": str(e)}
        return {
            "success": True,
            "count": len(logins),
            "logins": [_login_dict(c, reveal=reveal) for c in logins],
        }

    @mcp.tool()
    async def gpass_create_login(url: str, username: str, password: str = "") -> dict:
        """
        Store a new login.

        Args:
            url: Site address (e.g. "https://example.com")
            username: Username or email
            password: Password. Leave empty to let the server generate one.

        Returns:
            Dict with the created login id or error
        """
        if not url.strip() or not username.strip():
            return {"error": "Both url and username are required"}
        client = _get_client()
        if isinstance(client, dict):
            return client
        try:
            async with client:
                created = await client.create(
                    NewCredential(url=url, username=username, password=password)
                )
        except GPassError as e:
            return {"error": str(e)}
        return {"success": True, "login": _login_dict(created, reveal=False)}
