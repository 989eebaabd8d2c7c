"""Unit tests for structured logging helpers."""
import json
import logging
import sys

import pytest

from clientconfig.utils.logging import (
    KeyValueFormatter,
    StructuredJSONFormatter,
    configure_logging,
    get_context,
    log_context,
)


def make_record(**extra):
    record = logging.LogRecord(
        "clientconfig.tests", logging.INFO, __file__, 10, "Resolved %s", ("client.xml",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def package_logger():
    logger = logging.getLogger("clientconfig")
    yield logger
    for handler in logger.handlers:
        handler.close()


def test_json_formatter_fields():
    formatter = StructuredJSONFormatter(service_name="resolver")

    entry = json.loads(formatter.format(make_record(reference="a.xml", chain=("x", "y"))))

    assert entry["level"] == "INFO"
    assert entry["service_name"] == "resolver"
    assert entry["logger_name"] == "clientconfig.tests"
    assert entry["message"] == "Resolved client.xml"
    assert entry["reference"] == "a.xml"
    assert entry["chain"] == ["x", "y"]


def test_json_formatter_redacts_sensitive_extras():
    """Should never emit secret values."""
    formatter = StructuredJSONFormatter()

    entry = json.loads(
        formatter.format(make_record(password="dev-pass", details={"api_key": "k", "reference": "a.xml"}))
    )

    assert entry["password"] == "[REDACTED]"
    assert entry["details"] == {"api_key": "[REDACTED]", "reference": "a.xml"}


def test_json_formatter_includes_context():
    formatter = StructuredJSONFormatter()
    record = make_record(
        extra_context={"correlation_id": "abc", "operation_name": "resolve_imports", "root": "a.xml"}
    )

    entry = json.loads(formatter.format(record))

    assert entry["correlation_id"] == "abc"
    assert entry["operation_name"] == "resolve_imports"
    assert entry["root"] == "a.xml"


def test_json_formatter_exception_info():
    formatter = StructuredJSONFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "clientconfig.tests", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    entry = json.loads(formatter.format(record))

    assert entry["exception"]["type"] == "ValueError"
    assert entry["exception"]["message"] == "boom"
    assert entry["stack_trace"]


def test_key_value_formatter():
    line = KeyValueFormatter().format(make_record(reference="a.xml", token="t"))

    assert "Resolved client.xml" in line
    assert "reference=a.xml" in line
    assert "token=[REDACTED]" in line


def test_log_context_nests_and_restores():
    with log_context(correlation_id="outer", root="a.xml"):
        with log_context(operation_name="import", depth=2):
            inner = get_context()
        outer = get_context()
    after = get_context()

    assert inner["correlation_id"] == "outer"
    assert inner["operation_name"] == "import"
    assert inner["root"] == "a.xml"
    assert inner["depth"] == 2
    assert outer["operation_name"] is None
    assert "depth" not in outer
    assert after["correlation_id"] is None
    assert "root" not in after


def test_log_context_restores_on_error():
    with pytest.raises(RuntimeError):
        with log_context(correlation_id="failing"):
            raise RuntimeError("boom")

    assert get_context()["correlation_id"] is None


def test_configure_logging_writes_file(tmp_path, package_logger):
    log_file = tmp_path / "clientconfig.log"
    configure_logging(level=logging.INFO, log_file=str(log_file), enable_console=False)

    with log_context(correlation_id="abc", root="a.xml"):
        logging.getLogger("clientconfig.tests").info("Resource located", extra={"size": 10})
    for handler in package_logger.handlers:
        handler.flush()

    entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert entry["message"] == "Resource located"
    assert entry["correlation_id"] == "abc"
    assert entry["root"] == "a.xml"
    assert entry["size"] == 10


def test_configure_logging_respects_level(tmp_path, package_logger):
    log_file = tmp_path / "clientconfig.log"
    configure_logging(level=logging.WARNING, json_format=False, log_file=str(log_file), enable_console=False)

    logging.getLogger("clientconfig.tests").info("hidden")
    logging.getLogger("clientconfig.tests").warning("shown", extra={"reference": "a.xml"})
    for handler in package_logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "hidden" not in text
    assert "shown" in text
    assert "reference=a.xml" in text
