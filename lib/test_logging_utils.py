"""
Tests for logging utilities, dood!
"""

import logging

import pytest

from lib.logging_utils import REDACTED, SecretsFilter, configureLogger, getLogLevelByStr, initLogging


@pytest.fixture
def rootLoggerState():
    """Restore root logger handlers and levels touched by initLogging"""
    rootLogger = logging.getLogger()
    level = rootLogger.level
    quieted = {name: logging.getLogger(name).level for name in ("httpx", "httpcore", "google_genai", "telegram")}
    yield rootLogger
    # Pytest manages its own capture handlers, drop only ours
    for handler in rootLogger.handlers[:]:
        if any(isinstance(f, SecretsFilter) for f in handler.filters):
            rootLogger.removeHandler(handler)
    rootLogger.setLevel(level)
    for name, savedLevel in quieted.items():
        logging.getLogger(name).setLevel(savedLevel)


def makeRecord(msg, args=None) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


@pytest.mark.parametrize(
    "levelStr, expected",
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("Warning", logging.WARNING),
        ("nonsense", None),
        ("", None),
    ],
)
def test_get_log_level_by_str(levelStr, expected):
    assert getLogLevelByStr(levelStr) == expected


def test_get_log_level_default():
    assert getLogLevelByStr("nonsense", logging.ERROR) == logging.ERROR


class TestSecretsFilter:
    """Secrets never reach log output, dood!"""

    def test_redacts_formatted_message(self):
        record = makeRecord("GET https://api.telegram.org/bot%s/getFile", ("123:ABC",))

        assert SecretsFilter(["123:ABC"]).filter(record)

        assert record.getMessage() == f"GET https://api.telegram.org/bot{REDACTED}/getFile"

    def test_longest_secret_first(self):
        record = makeRecord("key=secret-long")

        SecretsFilter(["secret", "secret-long"]).filter(record)

        assert record.getMessage() == f"key={REDACTED}"

    def test_untouched_record_keeps_args(self):
        record = makeRecord("value %d", (5,))

        SecretsFilter(["123:ABC"]).filter(record)

        assert record.args == (5,)
        assert record.getMessage() == "value 5"

    def test_empty_secrets_are_ignored(self):
        secretsFilter = SecretsFilter(["", "x" * 10])
        assert secretsFilter.secrets == ["x" * 10]


def test_configure_logger_file(tmp_path):
    """File handler with its own level, dood!"""
    localLogger = logging.getLogger("glimpse.test.configure")
    logFile = tmp_path / "logs" / "bot.log"

    configureLogger(localLogger, {"level": "DEBUG", "file": str(logFile), "file-level": "WARNING"})
    try:
        assert localLogger.level == logging.DEBUG
        assert len(localLogger.handlers) == 1
        assert localLogger.handlers[0].level == logging.WARNING

        localLogger.warning("written")
        localLogger.info("not written")
        localLogger.handlers[0].flush()

        content = logFile.read_text(encoding="utf-8")
        assert "written" in content
        assert "not written" not in content
    finally:
        for handler in localLogger.handlers[:]:
            handler.close()
            localLogger.removeHandler(handler)


def test_init_logging(rootLoggerState):
    """Noisy libraries are quieted and secrets filter is installed, dood!"""
    initLogging({"level": "DEBUG", "console": True}, secrets=["123:ABC"])

    assert rootLoggerState.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
    assert logging.getLogger("telegram").level == logging.INFO
    assert rootLoggerState.handlers
    for handler in rootLoggerState.handlers:
        assert any(isinstance(f, SecretsFilter) for f in handler.filters)


def test_init_logging_redacts_logger_overrides(rootLoggerState, tmp_path):
    """Loggers with their own file and no propagation are redacted too, dood!"""
    logFile = tmp_path / "pipeline.log"
    overrideName = "glimpse.test.override"
    initLogging(
        {
            "level": "INFO",
            "logger": {overrideName: {"file": str(logFile), "propagate": False}},
        },
        secrets=["123:ABC"],
    )
    overrideLogger = logging.getLogger(overrideName)
    try:
        overrideLogger.info("GET https://api.telegram.org/bot%s/getFile", "123:ABC")
        for handler in overrideLogger.handlers:
            handler.flush()

        content = logFile.read_text(encoding="utf-8")
        assert f"bot{REDACTED}/getFile" in content
        assert "123:ABC" not in content
    finally:
        for handler in overrideLogger.handlers[:]:
            handler.close()
            overrideLogger.removeHandler(handler)
        overrideLogger.propagate = True
