"""
Listing record model and identity-based deduplication.

A ListingRecord is created during row extraction, receives its joined
agency name during the walk, and its contact/file data during enrichment.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TypeVar

from .parsing import normalize_whitespace

T = TypeVar("T")

# Free-text fields read from grid rows, in output order
TEXT_FIELDS: tuple[str, ...] = (
    "contract_number",
    "contract_title",
    "open_date",
    "deadline_date",
    "agency_code",
    "category_code",
)


@dataclass(frozen=True)
class FileLink:
    """A downloadable attachment referenced by a detail fragment."""

    title: str
    url: str

    def to_dict(self, url_key: str = "Url") -> dict[str, str]:
        return {"title": self.title, url_key: self.url}


@dataclass
class ListingRecord:
    """One procurement opportunity."""

    id: str = ""
    contract_number: str = ""
    contract_title: str = ""
    open_date: str = ""
    deadline_date: str = ""
    agency_code: str = ""
    category_code: str = ""
    detail_link: str | None = None
    agency_full: str | None = None
    contact_email: str = ""
    files: list[FileLink] = field(default_factory=list)
    detail_error: str | None = None

    @property
    def is_listing(self) -> bool:
        """A row counts as a listing only with a number or a title."""
        return bool(self.contract_number or self.contract_title)

    def normalize(self) -> "ListingRecord":
        """Whitespace-normalize every string field in place."""
        self.id = normalize_whitespace(self.id)
        for name in TEXT_FIELDS:
            setattr(self, name, normalize_whitespace(getattr(self, name)))
        if self.detail_link is not None:
            self.detail_link = normalize_whitespace(self.detail_link) or None
        return self

    def to_dict(self, url_key: str = "Url") -> dict[str, Any]:
        """Serialize with the output field names.

        ``detail_error`` is only present on records whose enrichment failed.
        """
        data: dict[str, Any] = {"id": self.id}
        for name in TEXT_FIELDS:
            data[name] = getattr(self, name)
        data["detail_link"] = self.detail_link
        data["agency_full"] = self.agency_full
        data["contact_email"] = self.contact_email
        data["files"] = [f.to_dict(url_key) for f in self.files]
        if self.detail_error:
            data["detail_error"] = self.detail_error
        return data


def identity_key(record: ListingRecord) -> str:
    """Key deciding whether two records are the same listing.

    Precedence: detail link, then contract number, then the full
    field content.
    """
    if record.detail_link:
        return record.detail_link
    if record.contract_number:
        return record.contract_number
    content = {"id": record.id, **{name: getattr(record, name) for name in TEXT_FIELDS}}
    return json.dumps(content, sort_keys=True)


def unique_by(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Keep the first item for each key, preserving order."""
    seen: set[str] = set()
    out: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def dedupe_records(records: Iterable[ListingRecord]) -> list[ListingRecord]:
    """Drop later duplicates by identity key, first occurrence wins."""
    return unique_by(records, identity_key)
