"""Tests for listing records and identity-based dedup."""

from bidcrawl.core.normalize.records import (
    FileLink,
    ListingRecord,
    dedupe_records,
    identity_key,
)


def test_identity_prefers_detail_link_over_contract_number():
    a = ListingRecord(id="1", contract_number="C-1", detail_link="https://x/Detail?id=1")
    b = ListingRecord(id="2", contract_number="C-1", detail_link="https://x/Detail?id=2")

    assert identity_key(a) == "https://x/Detail?id=1"
    assert dedupe_records([a, b]) == [a, b]


def test_identity_falls_back_to_contract_number():
    a = ListingRecord(contract_number="C-1", contract_title="First")
    b = ListingRecord(contract_number="C-1", contract_title="Second")

    assert dedupe_records([a, b]) == [a]


def test_identity_falls_back_to_full_content():
    a = ListingRecord(contract_title="Same")
    b = ListingRecord(contract_title="Same")
    c = ListingRecord(contract_title="Other")

    assert identity_key(a) == identity_key(b)
    assert dedupe_records([a, b, c]) == [a, c]


def test_dedupe_is_idempotent():
    records = [
        ListingRecord(id="1", contract_number="C-1", detail_link="https://x/1"),
        ListingRecord(id="2", contract_number="C-2"),
        ListingRecord(id="3", contract_number="C-2"),
        ListingRecord(contract_title="No number"),
    ]

    once = dedupe_records(records)
    twice = dedupe_records(once)

    assert twice == once
    assert [r.id for r in once] == ["1", "2", ""]


def test_to_dict_uses_url_key_and_omits_unset_error():
    record = ListingRecord(
        id="7",
        contract_number="C-7",
        files=[FileLink(title="Spec", url="https://x/spec.pdf")],
    )

    data = record.to_dict("Url")

    assert data["files"] == [{"title": "Spec", "Url": "https://x/spec.pdf"}]
    assert data["agency_full"] is None
    assert "detail_error" not in data

    record.detail_error = "FetchError: boom"
    assert record.to_dict()["detail_error"] == "FetchError: boom"


def test_is_listing_requires_number_or_title():
    assert ListingRecord(contract_number="C-1").is_listing
    assert ListingRecord(contract_title="Title").is_listing
    assert not ListingRecord(agency_code="DOT").is_listing
