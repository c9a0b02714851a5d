"""Reduce a page URL to the lookup key used to query matching logins."""

from __future__ import annotations

import re

# Checked in order, anchored at the start; at most one is stripped.
SCHEME_PREFIXES = ("file://", "http://", "https://")

_SEPARATORS = re.compile(r"[/?#]")


def normalize(raw_url: str | None) -> str:
    """
    Return the bare host part of ``raw_url``.

    Strips one known scheme prefix, then keeps everything before the first
    ``/``, ``?`` or ``#``. Case and trailing dots are preserved. Never raises:
    any string (including ``""``) yields a key, possibly empty.

    Examples:
        >>> normalize("https://example.com/login?x=1")
        'example.com'
        >>> normalize("http://a.b.com#frag")
        'a.b.com'
        >>> normalize("file:///c:/x")
        ''
    """
    if not raw_url:
        return ""
    url = str(raw_url)
    for prefix in SCHEME_PREFIXES:
        if url.startswith(prefix):
            url = url[len(prefix) :]
            break
    return _SEPARATORS.split(url, maxsplit=1)[0]
