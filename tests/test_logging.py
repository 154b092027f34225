import json
import logging

from customer_profiler.logging_config import JsonFormatter


def _record(**extra):
    rec = logging.LogRecord("profiler.dispatcher", logging.WARNING, __file__, 1, "rpc error", (), None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_json_formatter_includes_extra_fields():
    out = json.loads(JsonFormatter().format(_record(rpc_id="r-1", code=-32601)))
    assert out["level"] == "WARNING"
    assert out["logger"] == "profiler.dispatcher"
    assert out["message"] == "rpc error"
    assert out["rpc_id"] == "r-1"
    assert out["code"] == -32601
    assert "args" not in out and "levelno" not in out


def test_json_formatter_stringifies_unknown_types():
    out = json.loads(JsonFormatter().format(_record(payload=b"raw")))
    assert out["payload"] == "b'raw'"
