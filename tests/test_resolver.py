"""Tests for header alias column resolution."""

from bidcrawl.core.config.synonyms import FIELD_ALIASES
from bidcrawl.core.extract.base import NOT_FOUND, ColumnMapping
from bidcrawl.core.extract.resolver import resolve_column, resolve_columns


def test_first_matching_header_wins():
    assert resolve_column(["Bid #", "Title", "Open Date"], ["bid", "#"]) == 0


def test_no_match_returns_not_found():
    assert resolve_column(["Title", "Open Date"], ["deadline", "due"]) == NOT_FOUND


def test_matching_is_case_insensitive():
    assert resolve_column(["CONTRACT TITLE"], ["title"]) == 0


def test_empty_and_missing_headers_never_match():
    assert resolve_column(["", None, "Closing Date"], ["close", "closing"]) == 2
    assert resolve_column(["", None], [""]) == NOT_FOUND


def test_leftmost_column_beats_alias_order():
    # "number" is the last alias but sits in an earlier column than "bid"
    headers = ["Number", "Bid Type"]
    assert resolve_column(headers, ["bid", "number"]) == 0


def test_resolve_columns_over_delaware_headers():
    headers = ["Contract Number", "Contract Title", "Open Date", "Deadline Date", "Agency Code", "UNSPSC"]

    mapping = resolve_columns(headers, FIELD_ALIASES)

    assert mapping == {
        "contract_number": 0,
        "contract_title": 1,
        "open_date": 2,
        "deadline_date": 3,
        "agency_code": 4,
        "category_code": 5,
    }
    assert mapping.missing() == []


def test_resolve_columns_reports_missing_fields():
    mapping = resolve_columns(["Solicitation", "Description"], FIELD_ALIASES)

    assert mapping["contract_number"] == 0
    assert mapping["contract_title"] == 1
    assert set(mapping.missing()) == {"open_date", "deadline_date", "agency_code", "category_code"}


def test_unknown_field_defaults_to_not_found():
    mapping = ColumnMapping({"contract_number": 0})

    assert mapping["agency_code"] == NOT_FOUND
    assert mapping.cell(["C-1"], "agency_code") == ""
