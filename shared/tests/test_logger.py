import json
import logging

from shared.app_logging.logger import (CorrelationContext, CorrelationIDFilter,
                                       JSONFormatter, get_correlation_id)


def _record(msg="hello"):
    return logging.LogRecord("extractor.test", logging.INFO, __file__, 1, msg, None, None)


def test_correlation_context_scopes_id():
    assert get_correlation_id() is None
    with CorrelationContext("article-1") as cid:
        assert cid == "article-1"
        record = _record()
        CorrelationIDFilter().filter(record)
        assert record.correlation_id == "article-1"
    assert get_correlation_id() is None


def test_json_formatter_includes_extras():
    record = _record()
    record.correlation_id = "c-1"
    record.error_type = "NetworkError"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "hello"
    assert entry["correlation_id"] == "c-1"
    assert entry["error_type"] == "NetworkError"
