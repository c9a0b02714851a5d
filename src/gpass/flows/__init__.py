"""
GPass flows - the two ways front ends consume the login store.

- ExtensionLookupFlow: one shot per popup open; active tab -> key -> matches.
- WebSyncFlow: a page session bound to a CredentialCache; table, filter, create.
"""

from .extension import (
    ExtensionLookupFlow,
    LookupOutcome,
    LookupResult,
    LookupState,
    StaticTabSource,
    TabSource,
)
from .web import CreateForm, SortOrder, TableView, WebSyncFlow

__all__ = [
    "CreateForm",
    "ExtensionLookupFlow",
    "LookupOutcome",
    "LookupResult",
    "LookupState",
    "SortOrder",
    "StaticTabSource",
    "TabSource",
    "TableView",
    "WebSyncFlow",
]
