"""TUI screens package."""

from .new_credential import NewCredentialScreen

__all__ = [
    "NewCredentialScreen",
]
