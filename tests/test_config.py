"""Tests for configuration loading and overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bidcrawl.core.config import (
    ConfigError,
    CrawlConfig,
    EnrichmentConfig,
    GridConfig,
    apply_overrides,
    load_crawl_config,
    validate_config_file,
)


def test_defaults_match_delaware_portal():
    config = CrawlConfig()

    assert config.start_url == "https://mmp.delaware.gov/Bids"
    assert config.output.path == Path("de_bids.json")
    assert config.browser.navigation_timeout_ms == 60000
    assert config.max_pages == 300
    assert config.max_items == 5000
    assert config.enrichment.concurrency == 4
    assert config.output.file_url_key == "Url"


def test_missing_default_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert load_crawl_config() == CrawlConfig()


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        load_crawl_config(tmp_path / "nope.yaml")


def test_yaml_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("BIDS_URL", "https://bids.example.gov/Bids")
    monkeypatch.delenv("OUT_DIR", raising=False)
    path = tmp_path / "crawl.yaml"
    path.write_text(
        "start_url: ${BIDS_URL}\n"
        "max_pages: 5\n"
        "output:\n"
        "  path: ${OUT_DIR:-out}/bids.json\n"
        "grid:\n"
        "  extra_aliases:\n"
        "    contract_number: [Ref No]\n",
        encoding="utf-8",
    )

    config = load_crawl_config(path)

    assert config.start_url == "https://bids.example.gov/Bids"
    assert config.max_pages == 5
    assert config.output.path == Path("out/bids.json")
    assert config.grid.field_aliases["contract_number"][-1] == "ref no"


def test_invalid_values_raise_config_error(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text("start_url: /relative\nmax_pages: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_crawl_config(path)

    assert "max_pages" in excinfo.value.details
    assert len(validate_config_file(path)) == 2


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    assert validate_config_file(path)


def test_overrides_apply_and_ignore_none():
    config = apply_overrides(
        CrawlConfig(),
        start_url="https://bids.example.gov/Bids",
        headless=False,
        concurrency=2,
        output_path="x.json",
        max_items=None,
    )

    assert config.start_url == "https://bids.example.gov/Bids"
    assert config.browser.headless is False
    assert config.enrichment.concurrency == 2
    assert config.output.path == Path("x.json")
    assert config.max_items == 5000


def test_unknown_or_invalid_override():
    with pytest.raises(ConfigError):
        apply_overrides(CrawlConfig(), retries=3)
    with pytest.raises(ConfigError):
        apply_overrides(CrawlConfig(), concurrency=0)


def test_detail_template_needs_id_placeholder():
    with pytest.raises(ValidationError):
        EnrichmentConfig(detail_url_template="/Bids/GetBidDetail")


def test_aliases_are_lowercased():
    grid = GridConfig(field_aliases={"contract_number": ["Bid No"]})

    assert grid.field_aliases == {"contract_number": ["bid no"]}
