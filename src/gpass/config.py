"""Runtime configuration for talking to a GPass backend."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ConfigError

DEFAULT_API_URL = "http://localhost:3625"
DEFAULT_TIMEOUT = 30.0
# The reference store caps unparameterised list calls at 25 rows.
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class GPassConfig:
    """
    Process-wide client configuration.

    Built once at startup (usually via ``from_env``) and passed into
    ``CredentialClient``; nothing in the package reads it from globals.

    Attributes:
        base_url: Backend root, without the ``/logins/`` path
        timeout: Per-request timeout in seconds, enforced by httpx
        page_size: ``Limit`` sent when paging through list results
    """

    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigError("base_url cannot be empty")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.page_size < 1:
            raise ConfigError(f"page_size must be at least 1, got {self.page_size}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GPassConfig:
        """Build a config from ``GPASS_API_URL``, ``GPASS_TIMEOUT`` and ``GPASS_PAGE_SIZE``."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("GPASS_API_URL") or DEFAULT_API_URL,
            timeout=_parse_number(env, "GPASS_TIMEOUT", float, DEFAULT_TIMEOUT),
            page_size=_parse_number(env, "GPASS_PAGE_SIZE", int, DEFAULT_PAGE_SIZE),
        )


def _parse_number(env: Mapping[str, str], name: str, kind: type, default):
    raw = env.get(name)
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a {kind.__name__}, got {raw!r}") from e
