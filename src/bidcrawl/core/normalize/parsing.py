"""
Text and URL helpers shared by extraction and enrichment.
"""

from __future__ import annotations

import re
from urllib.parse import quote, urljoin

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace to single spaces and trim the ends."""
    if text is None:
        return ""
    return _WHITESPACE.sub(" ", str(text)).strip()


def resolve_url(href: str | None, base_url: str | None) -> str:
    """Resolve a possibly relative href against a base URL.

    Returns the href unchanged when it cannot be resolved.
    """
    href = (href or "").strip()
    if not href:
        return ""
    if not base_url:
        return href
    try:
        return urljoin(base_url, href)
    except ValueError:
        return href


def fill_template(template: str, identifier: str) -> str:
    """Substitute a URL-encoded identifier into an ``{id}`` template."""
    return template.replace("{id}", quote(identifier, safe=""))
