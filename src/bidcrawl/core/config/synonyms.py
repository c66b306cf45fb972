"""
Header alias lists for grid column resolution.

Each logical field maps to an ordered list of lowercase substrings. A header
matches a field when its normalized text contains any of the aliases; the
leftmost matching header wins.
"""

from __future__ import annotations

# =============================================================================
# Logical Field -> Header Substrings
# =============================================================================

FIELD_ALIASES: dict[str, list[str]] = {
    "contract_number": [
        "contract",
        "solicitation",
        "bid",
        "#",
        "number",
    ],
    "contract_title": [
        "title",
        "description",
    ],
    "open_date": [
        "open",
        "posted",
        "issue",
        "start",
    ],
    "deadline_date": [
        "deadline",
        "close",
        "closing",
        "due",
    ],
    "agency_code": [
        "agency",
        "dept",
        "department",
    ],
    "category_code": [
        "unspsc",
        "unspc",
        "commodity",
        "category",
    ],
}


# =============================================================================
# Lookup Table Header Hints
# =============================================================================

CODE_HEADERS: list[str] = ["code", "abbreviation", "abbr"]

NAME_HEADERS: list[str] = ["agency", "name", "department", "description"]


# =============================================================================
# Attachment Detection
# =============================================================================

FILE_EXTENSIONS: list[str] = ["pdf", "doc", "docx", "xls", "xlsx", "zip", "csv", "txt"]

FILE_MARKERS: list[str] = ["download", "document", "attachment", "amend"]


def merge_aliases(
    base: dict[str, list[str]],
    extra: dict[str, list[str]] | None,
) -> dict[str, list[str]]:
    """Merge additional aliases into a copy of the base mapping.

    Extra aliases for a known field are appended after the defaults so the
    built-in priority order is preserved.
    """
    merged = {field: list(aliases) for field, aliases in base.items()}
    for field, aliases in (extra or {}).items():
        current = merged.setdefault(field, [])
        for alias in aliases:
            alias = alias.lower().strip()
            if alias and alias not in current:
                current.append(alias)
    return merged
