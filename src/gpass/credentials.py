"""
GPass backend credentials.

The backend authenticates every request with HTTP basic auth. The username
and password come from an injected credential store or, failing that, from
the environment; they are never embedded in code.

Usage:
    provider = StoreCredentialProvider(store)   # or StoreCredentialProvider()
    client = CredentialClient(GPassConfig.from_env(), provider)
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .errors import CredentialsNotConfigured


@dataclass(frozen=True)
class CredentialSpec:
    """Where a single credential value comes from and how to obtain it."""

    env_var: str
    description: str
    required: bool = True
    help_url: str = ""
    credential_id: str = ""


GPASS_CREDENTIALS = {
    "gpass_username": CredentialSpec(
        env_var="GPASS_USERNAME",
        description="GPass API basic-auth username",
        help_url="https://github.com/passwall/passwall-server#configuration",
        credential_id="gpass_username",
    ),
    "gpass_password": CredentialSpec(
        env_var="GPASS_PASSWORD",
        description="GPass API basic-auth password",
        help_url="https://github.com/passwall/passwall-server#configuration",
        credential_id="gpass_password",
    ),
}


@runtime_checkable
class CredentialStore(Protocol):
    """Anything with a ``get(name)`` lookup, e.g. a credential store adapter."""

    def get(self, name: str) -> str | None: ...


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies the ``Authorization`` header value for each backend call."""

    def authorization_header(self) -> str: ...


@dataclass(frozen=True)
class BasicAuthCredentials:
    """A resolved username/password pair."""

    username: str
    password: str = field(repr=False)

    def authorization_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        return f"Basic {token}"


def resolve_credentials(store: CredentialStore | None = None) -> BasicAuthCredentials:
    """
    Resolve the backend credentials from ``store`` or the environment.

    Raises:
        CredentialsNotConfigured: If either value is missing.
        TypeError: If the store returns a non-string value.
    """
    values: dict[str, str | None] = {}
    for name, spec in GPASS_CREDENTIALS.items():
        value = store.get(name) if store is not None else None
        if value is not None and not isinstance(value, str):
            raise TypeError(
                f"Expected string from credentials.get('{name}'), got {type(value).__name__}"
            )
        values[name] = value or os.getenv(spec.env_var)

    missing = [
        GPASS_CREDENTIALS[name].env_var
        for name, value in values.items()
        if not value and GPASS_CREDENTIALS[name].required
    ]
    if missing:
        raise CredentialsNotConfigured(
            f"GPass credentials not configured: set {', '.join(missing)} "
            "or configure them in the credential store"
        )
    return BasicAuthCredentials(values["gpass_username"], values["gpass_password"])


class StoreCredentialProvider:
    """Resolves credentials on every call so rotated values take effect immediately."""

    def __init__(self, store: CredentialStore | None = None):
        self._store = store

    def authorization_header(self) -> str:
        return resolve_credentials(self._store).authorization_header()
