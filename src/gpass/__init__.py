"""
GPass - client, cache and lookup flows for a personal credential store.

Usage:
    from gpass import CredentialCache, CredentialClient, GPassConfig, StoreCredentialProvider

    client = CredentialClient(GPassConfig.from_env(), StoreCredentialProvider())
    cache = CredentialCache(client)
    snapshot = await cache.revalidate()
"""

from .cache import CredentialCache
from .client import CredentialClient
from .config import GPassConfig
from .credentials import (
    BasicAuthCredentials,
    CredentialProvider,
    StoreCredentialProvider,
    resolve_credentials,
)
from .errors import (
    ConfigError,
    CredentialsNotConfigured,
    GPassError,
    NoActiveTab,
    ProtocolError,
    TransportError,
)
from .models import CollectionSnapshot, Credential, NewCredential
from .normalize import normalize

__version__ = "0.1.0"

__all__ = [
    "BasicAuthCredentials",
    "CollectionSnapshot",
    "ConfigError",
    "Credential",
    "CredentialCache",
    "CredentialClient",
    "CredentialProvider",
    "CredentialsNotConfigured",
    "GPassConfig",
    "GPassError",
    "NewCredential",
    "NoActiveTab",
    "ProtocolError",
    "StoreCredentialProvider",
    "TransportError",
    "normalize",
    "resolve_credentials",
]
