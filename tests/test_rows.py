"""Tests for row extraction."""

from bidcrawl.core.extract.base import ColumnMapping, RawRow
from bidcrawl.core.extract.rows import build_detail_link, extract_row, extract_rows

TEMPLATE = "/Bids/GetBidDetail?id={id}"
BASE = "https://bids.example.gov/Bids"


def test_short_row_yields_empty_strings_for_out_of_range_columns():
    mapping = ColumnMapping({"contract_number": 0, "contract_title": 1, "open_date": 2, "deadline_date": 3})
    row = RawRow(id="17", text="C-17 Bridge Repair", cells=["C-17", "Bridge Repair"])

    record = extract_row(row, mapping, TEMPLATE, BASE)

    assert record is not None
    assert record.contract_number == "C-17"
    assert record.contract_title == "Bridge Repair"
    assert record.open_date == ""
    assert record.deadline_date == ""


def test_whitespace_is_normalized():
    mapping = ColumnMapping({"contract_number": 0, "contract_title": 1})
    row = RawRow(id=" 5 ", cells=["  C-5\n", "Snow \t Removal  Services"])

    record = extract_row(row, mapping, TEMPLATE, BASE)

    assert record.id == "5"
    assert record.contract_number == "C-5"
    assert record.contract_title == "Snow Removal Services"


def test_row_without_number_or_title_is_dropped():
    mapping = ColumnMapping({"contract_number": 0, "contract_title": 1, "agency_code": 2})
    row = RawRow(id="9", cells=["", " ", "DOT"])

    assert extract_row(row, mapping, TEMPLATE, BASE) is None


def test_detail_link_is_absolute_and_null_without_id():
    assert build_detail_link("42", TEMPLATE, BASE) == "https://bids.example.gov/Bids/GetBidDetail?id=42"
    assert build_detail_link("", TEMPLATE, BASE) is None

    mapping = ColumnMapping({"contract_number": 0})
    record = extract_row(RawRow(id="", cells=["C-1"]), mapping, TEMPLATE, BASE)
    assert record.detail_link is None


def test_detail_link_quotes_identifier():
    assert build_detail_link("a b/c", TEMPLATE, BASE) == "https://bids.example.gov/Bids/GetBidDetail?id=a%20b%2Fc"


def test_extract_rows_keeps_listing_rows_in_order():
    mapping = ColumnMapping({"contract_number": 0, "contract_title": 1})
    rows = [
        RawRow(id="1", cells=["C-1", "First"]),
        RawRow(id="2", cells=["", ""]),
        RawRow(id="3", cells=["", "Third"]),
    ]

    records = extract_rows(rows, mapping, TEMPLATE, BASE)

    assert [r.id for r in records] == ["1", "3"]
