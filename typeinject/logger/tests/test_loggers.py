import io

import pytest

from typeinject.logger.factory import LoggerFactory
from typeinject.logger.memory_logger import LogEntry, MemoryLogger
from typeinject.logger.noop_logger import NoopLogger
from typeinject.logger.pretty_logger import PrettyLogger


def test_memory_logger_records_entries():
    logger = MemoryLogger()
    logger.debug("mapped values", types=["str"])
    logger.warn("value not found", type="Clock")
    assert logger.messages == ["mapped values", "value not found"]
    assert logger.entries[0] == LogEntry("DEBUG", "mapped values", {"types": ["str"]})
    assert logger.at_level("WARN") == [LogEntry("WARN", "value not found", {"type": "Clock"})]


def test_pretty_logger_writes_level_message_and_context():
    stream = io.StringIO()
    logger = PrettyLogger(stream=stream)
    logger.warn("value not found", type="Clock", op="apply")
    out = stream.getvalue()
    assert "warn" in out
    assert "value not found type='Clock' op='apply'" in out


def test_pretty_logger_omits_empty_context():
    stream = io.StringIO()
    PrettyLogger(stream=stream).debug("registry reset")
    assert stream.getvalue().rstrip().endswith("registry reset")


def test_pretty_logger_defaults_to_stderr(capsys: pytest.CaptureFixture[str]):
    PrettyLogger().debug("hello")
    assert "hello" in capsys.readouterr().err


def test_factory_default_is_noop():
    assert isinstance(LoggerFactory().create(), NoopLogger)


def test_factory_caches_instances():
    factory = LoggerFactory()
    first = factory.create("memory")
    assert isinstance(first, MemoryLogger)
    assert factory.create("memory") is first


def test_factory_uses_default_impl():
    assert isinstance(LoggerFactory(default_impl="pretty").create(), PrettyLogger)


def test_factory_rejects_unknown_default():
    with pytest.raises(ValueError, match="Unknown logger implementation"):
        LoggerFactory(default_impl="loki")


def test_factory_rejects_unknown_name():
    with pytest.raises(ValueError, match="available: noop, pretty, memory"):
        LoggerFactory().create("loki")
