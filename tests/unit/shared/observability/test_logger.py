import json
import logging
from typing import Any, Dict

import pytest

from shared.observability.context import RequestContext, reset_current_context, set_current_context
from shared.observability.logger import FORBIDDEN_KEYS, get_logger, set_log_level


class DummyHandler(logging.Handler):
    """Capture log records for assertions."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        self.records.append(record)


@pytest.fixture
def captured():
    """Logger with a dummy handler attached; restores the DEBUG level afterwards."""
    logger = get_logger("test-service")
    logger.logger.handlers = []
    handler = DummyHandler()
    logger.logger.addHandler(handler)
    yield logger, handler
    set_log_level("DEBUG")


def _payload(handler: DummyHandler, index: int = 0) -> Dict[str, Any]:
    return json.loads(handler.records[index].getMessage())


CTX = RequestContext(
    trace_id="t123",
    trace_source="WEB",
    request_id="r456",
    request_source="SPICE:GET/api/shops",
    span_id="s789abcd",
    span_source="SPICE:GET/api/shops",
)


def test_extra_kwargs_go_under_data(captured):
    logger, handler = captured

    logger.info("Shop listed", region="tokyo", count=3)

    payload = _payload(handler)
    assert payload["message"] == "Shop listed"
    assert payload["service"] == "test-service"
    assert payload["level"] == "INFO"
    assert payload["data"] == {"region": "tokyo", "count": 3}


def test_explicit_data_merges_with_kwargs(captured):
    logger, handler = captured

    logger.info("With data", data={"a": 1}, b=2)
    logger.info("Non-dict data", data=[1, 2, 3])

    assert _payload(handler, 0)["data"] == {"a": 1, "b": 2}
    assert _payload(handler, 1)["data"] == {"value": [1, 2, 3]}


def test_domain_ids_stay_top_level(captured):
    logger, handler = captured

    logger.info("User created", user_id="u1", shop_id="shop-1", data={"x": 1})

    payload = _payload(handler)
    assert payload["user_id"] == "u1"
    assert payload["shop_id"] == "shop-1"
    assert payload["data"] == {"x": 1}


def test_explicit_context_overrides_ambient_context(captured):
    logger, handler = captured
    ambient = RequestContext(
        trace_id="t-ambient",
        trace_source="A",
        request_id="r-ambient",
        request_source="A",
        span_id="s0000000a",
        span_source="A",
    )

    token = set_current_context(ambient)
    try:
        logger.info("Ambient only")
        logger.info("Explicit", CTX)
        logger.info("Keyword wins", CTX, trace_id="t-override")
    finally:
        reset_current_context(token)

    assert _payload(handler, 0)["trace_id"] == "t-ambient"
    assert _payload(handler, 1)["trace_id"] == "t123"
    assert _payload(handler, 1)["span_source"] == "SPICE:GET/api/shops"
    assert _payload(handler, 2)["trace_id"] == "t-override"


def test_forbidden_keys_are_dropped(captured):
    logger, handler = captured

    kwargs: Dict[str, Any] = {key: "SECRET" for key in FORBIDDEN_KEYS}
    kwargs["safe"] = "ok"
    logger.warning("Secrets", data={"password": "hunter2", "host": "db"}, **kwargs)

    payload = _payload(handler)
    for forbidden in FORBIDDEN_KEYS:
        assert forbidden not in payload
        assert forbidden not in payload["data"]
    assert payload["data"] == {"host": "db", "safe": "ok"}


def test_set_log_level_filters_lower_levels(captured):
    logger, handler = captured

    set_log_level("warning")
    logger.info("Hidden")
    logger.error("Shown")

    assert len(handler.records) == 1
    assert _payload(handler)["level"] == "ERROR"


def test_set_log_level_rejects_unknown_level():
    with pytest.raises(ValueError):
        set_log_level("LOUD")


def test_get_logger_returns_same_instance():
    assert get_logger("spice.cache-check") is get_logger("spice.cache-check")
