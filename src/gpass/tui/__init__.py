"""Terminal front end for browsing and adding GPass logins."""

from .app import GPassTUI

__all__ = ["GPassTUI"]
