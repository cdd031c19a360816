import io
import json
from datetime import timedelta
from unittest import mock

import pytest

from npcbrain.log import (
    FieldType,
    Level,
    Logger,
    any_field,
    bool_field,
    bytes_field,
    complex_field,
    duration_field,
    error_field,
    int_field,
    provide,
    string_field,
    uint_field,
)


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def _logger(level=Level.INFO):
    stream = io.StringIO()
    return Logger(level, stream), stream


def test_info_writes_json_entry():
    logger, stream = _logger()
    logger.info("hello")
    (rec,) = _records(stream)
    assert rec["msg"] == "hello"
    assert rec["level"] == "info"
    assert isinstance(rec["ts"], float)


def test_debug_filtered_at_info():
    logger, stream = _logger()
    logger.debug("quiet")
    assert stream.getvalue() == ""


def test_set_level_enables_debug():
    logger, stream = _logger()
    logger.set_level(Level.DEBUG)
    logger.debug("loud")
    assert logger.get_level() == Level.DEBUG
    assert [r["msg"] for r in _records(stream)] == ["loud"]


@pytest.mark.parametrize("level", [Level.TRACE, Level.SILENT, Level.NONE])
def test_unknown_levels_map_to_info(level):
    logger, _ = _logger(Level.ERROR)
    logger.set_level(level)
    assert logger.get_level() == Level.INFO


def test_log_with_trace_logs_as_info():
    logger, stream = _logger()
    logger.log(Level.TRACE, "traced")
    (rec,) = _records(stream)
    assert rec["level"] == _records_level_of(Level.INFO)


def _records_level_of(level):
    logger, stream = _logger(Level.DEBUG)
    logger.log(level, "probe")
    return _records(stream)[0]["level"]


def test_log_below_threshold_dropped():
    logger, stream = _logger(Level.ERROR)
    logger.log(Level.WARN, "dropped")
    logger.error("kept")
    assert [r["msg"] for r in _records(stream)] == ["kept"]


def test_with_fields_adds_context_and_leaves_parent_alone():
    logger, stream = _logger()
    child = logger.with_fields(string_field("npc", "guard"))
    child.info("child")
    logger.info("parent")
    first, second = _records(stream)
    assert first["npc"] == "guard"
    assert "npc" not in second


def test_field_values_encoded():
    logger, stream = _logger()
    logger.info(
        "fields",
        int_field("count", 7),
        bool_field("ok", True),
        string_field("name", "orc"),
        duration_field("took", timedelta(seconds=1.5)),
        bytes_field("raw", b"abc"),
        any_field("list", [1, 2]),
    )
    (rec,) = _records(stream)
    assert rec["count"] == 7
    assert rec["ok"] is True
    assert rec["name"] == "orc"
    assert rec["took"] == 1.5
    assert rec["raw"] == "abc"
    assert rec["list"] == [1, 2]


def test_complex_field_encoding():
    logger, stream = _logger()
    logger.info("c", complex_field("z", complex(1, 2)))
    assert _records(stream)[0]["z"] == "1+2i"


def test_error_fields():
    logger, stream = _logger()
    logger.error("failed", error_field(ValueError("boom")), error_field(KeyError("k"), "cause"))
    logger.error("nil", error_field(None))
    first, second = _records(stream)
    assert first["error"] == "boom"
    assert first["cause"] == str(KeyError("k"))
    assert "error" not in second


def test_field_types():
    assert bool_field("a", True).type == FieldType.BOOL
    assert error_field(ValueError("x")).key == "error"
    assert uint_field("u", 3).type == FieldType.UINT
    assert any_field("a", object()).type == FieldType.UNKNOWN


def test_uint_field_rejects_negative():
    with pytest.raises(ValueError):
        uint_field("u", -1)


def test_fatal_writes_then_exits():
    logger, stream = _logger()
    with pytest.raises(SystemExit) as info:
        logger.fatal("dying")
    assert info.value.code == 1
    assert _records(stream)[0]["msg"] == "dying"


def test_sampling_drops_repeats_within_a_second():
    logger, stream = _logger()
    with mock.patch("time.monotonic", return_value=50.0):
        for _ in range(150):
            logger.info("spam")
        logger.info("other")
    msgs = [r["msg"] for r in _records(stream)]
    assert msgs.count("spam") == 100
    assert msgs.count("other") == 1


def test_with_context_returns_same_logger():
    logger, _ = _logger()
    assert logger.with_context(object()) is logger


def test_provide_returns_shared_instance():
    first = provide()
    assert provide() is first
    assert first.get_level() in (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR, Level.FATAL)