import json
import logging
import sys

from bitebite.core.logging_setup import JsonFormatter, configure_logging
from bitebite.core.request_context import clear_request_context, set_request_context


def _record(msg, args, level=logging.ERROR, **extra):
    record = logging.LogRecord("bitebite.services.orders", level, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_renders_interpolated_message():
    record = _record("%s create failed customer=%s", ("[ORDERS]", "Jane"))

    payload = json.loads(JsonFormatter("%(message)s").format(record))

    assert payload["message"] == "[ORDERS] create failed customer=Jane"
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "bitebite.services.orders"


def test_formatter_masks_secrets_and_adds_request_fields():
    set_request_context(request_id="req-1", session_id="cart-9")
    try:
        record = _record(
            "denied x-admin-token=%s",
            ("hunter2",),
            level=logging.WARNING,
            endpoint="/api/orders",
            method="GET",
            status_code=401,
        )
        payload = json.loads(JsonFormatter("%(message)s").format(record))
    finally:
        clear_request_context()

    assert "hunter2" not in payload["message"]
    assert payload["request_id"] == "req-1"
    assert payload["session_id"] == "cart-9"
    assert payload["endpoint"] == "/api/orders"
    assert payload["status_code"] == 401


def test_formatter_includes_exception_text():
    try:
        raise RuntimeError("disk full")
    except RuntimeError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", (), sys.exc_info())

    payload = json.loads(JsonFormatter("%(message)s").format(record))

    assert "RuntimeError: disk full" in payload["exception"]


def test_configured_root_logger_writes_json_lines(capsys):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging()
        logging.getLogger("bitebite.services.checkout").warning("%s failed key=%s", "[CHECKOUT]", "foodhub-cart:a")
        err = capsys.readouterr().err
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "Logging error" not in err
    line = json.loads(err.strip().splitlines()[-1])
    assert line["message"] == "[CHECKOUT] failed key=foodhub-cart:a"
