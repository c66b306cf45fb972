"""Tests for logging setup."""

import json
import logging

from bidcrawl.core.logging import JSONFormatter, get_contextual_logger, setup_logging


def test_json_formatter_includes_context():
    record = logging.LogRecord("bidcrawl.test", logging.INFO, __file__, 1, "Page %d read", (2,), None)
    record.site = "delaware_mmp"
    record.page = 2

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "Page 2 read"
    assert data["site"] == "delaware_mmp"
    assert data["page"] == 2
    assert "run_id" not in data


def test_file_log_carries_run_context(tmp_path):
    log_file = tmp_path / "logs" / "crawl.log"
    setup_logging(level="INFO", log_file=log_file, json_format=True, rich_console=False)

    log = get_contextual_logger("bidcrawl.test", site="delaware_mmp", run_id="abc123")
    log.info("Walk finished", extra={"page": 3})
    for handler in logging.getLogger("bidcrawl").handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    data = json.loads(line)
    assert data["run_id"] == "abc123"
    assert data["site"] == "delaware_mmp"
    assert data["page"] == 3

    for handler in list(logging.getLogger("bidcrawl").handlers):
        handler.close()
        logging.getLogger("bidcrawl").removeHandler(handler)
