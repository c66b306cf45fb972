"""
Detail and document-list fragment parsing.

Pulls the contact email, attachment links and the document-list id out of
the partial HTML documents returned by a portal's detail endpoints.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import urlparse

from lxml import html as lxml_html
from lxml.html import HtmlElement

from ..config.synonyms import FILE_EXTENSIONS, FILE_MARKERS
from ..normalize.parsing import normalize_whitespace, resolve_url
from ..normalize.records import FileLink

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)

# Link schemes that never point at a downloadable file
NON_FILE_SCHEMES = ("mailto:", "javascript:", "tel:")


@dataclass
class FragmentData:
    """What one fragment contributes to a record."""

    email: str = ""
    files: list[FileLink] = field(default_factory=list)
    document_id: str = ""


def parse_html_fragment(html: str) -> HtmlElement | None:
    """Parse a partial document, None when it is blank."""
    if not html or not html.strip():
        return None
    return lxml_html.fromstring(html)


def _visible_text(tree: HtmlElement) -> str:
    """Text content without script and style bodies."""
    parts = []
    for text in tree.xpath("//text()[not(ancestor::script) and not(ancestor::style)]"):
        parts.append(str(text))
    return " ".join(parts)


def extract_email(tree: HtmlElement) -> str:
    """Contact email: first mailto link, else an email-shaped token in the text."""
    for anchor in tree.xpath("//a[@href]"):
        href = (anchor.get("href") or "").strip()
        if href.lower().startswith("mailto:"):
            address = href[len("mailto:"):].split("?", 1)[0].strip()
            if address:
                return address

    match = EMAIL_PATTERN.search(_visible_text(tree))
    return match.group(0) if match else ""


def is_file_url(
    url: str,
    extensions: Iterable[str] = FILE_EXTENSIONS,
    markers: Iterable[str] = FILE_MARKERS,
) -> bool:
    """Whether a link target looks like a downloadable document."""
    lowered = url.lower()
    if not lowered or lowered.startswith(NON_FILE_SCHEMES):
        return False

    path = urlparse(lowered).path
    if any(path.endswith(f".{ext.lower()}") for ext in extensions):
        return True
    return any(marker.lower() in lowered for marker in markers)


def extract_files(
    tree: HtmlElement,
    base_url: str | None = None,
    extensions: Iterable[str] = FILE_EXTENSIONS,
    markers: Iterable[str] = FILE_MARKERS,
) -> list[FileLink]:
    """Attachment links in document order, deduplicated by (title, url)."""
    extensions = list(extensions)
    markers = list(markers)
    files: list[FileLink] = []

    for anchor in tree.xpath("//a[@href]"):
        url = resolve_url(anchor.get("href"), base_url)
        if not is_file_url(url, extensions, markers):
            continue
        title = (
            normalize_whitespace(anchor.text_content())
            or normalize_whitespace(anchor.get("aria-label"))
            or "File"
        )
        files.append(FileLink(title=title, url=url))

    return merge_files(files)


def extract_document_id(tree: HtmlElement, selector: str | None) -> str:
    """Value of the hidden input naming the document-list id, if any."""
    if not selector:
        return ""
    found = tree.cssselect(selector)
    if not found:
        return ""
    element = found[0]
    return normalize_whitespace(element.get("value") or element.text_content())


def merge_files(*groups: Iterable[FileLink]) -> list[FileLink]:
    """Concatenate file lists keeping the first (title, url) occurrence."""
    seen: set[tuple[str, str]] = set()
    merged: list[FileLink] = []
    for group in groups:
        for link in group:
            key = (link.title, link.url)
            if key in seen:
                continue
            seen.add(key)
            merged.append(link)
    return merged


def parse_fragment(
    html: str,
    base_url: str | None = None,
    extensions: Iterable[str] = FILE_EXTENSIONS,
    markers: Iterable[str] = FILE_MARKERS,
    document_id_selector: str | None = None,
) -> FragmentData:
    """Extract email, files and document id from one fragment."""
    tree = parse_html_fragment(html)
    if tree is None:
        return FragmentData()

    return FragmentData(
        email=extract_email(tree),
        files=extract_files(tree, base_url, extensions, markers),
        document_id=extract_document_id(tree, document_id_selector),
    )
