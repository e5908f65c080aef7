"""
Logging utilities for Glimpse bot.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
REDACTED = "<redacted>"


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by string."""
    level = getattr(logging, str(levelStr).upper(), None)
    if not isinstance(level, int):
        logger.error(f"Invalid log level '{levelStr}'")
        return default
    return level


class SecretsFilter(logging.Filter):
    """
    Replace known secrets (bot token, API keys) in log records.

    Bot API URLs carry the token in their path, and the HTTP client libraries
    log those URLs at debug level.
    """

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self.secrets: List[str] = sorted({s for s in secrets if s}, key=len, reverse=True)

    def _redact(self, value: str) -> str:
        for secret in self.secrets:
            value = value.replace(secret, REDACTED)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = self._redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _createFileHandler(logFile: str, rotate: bool) -> logging.Handler:
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)
    if rotate:
        return TimedRotatingFileHandler(
            filename=logFile,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    return logging.FileHandler(logFile, encoding="utf-8")


def configureLogger(
    localLogger: logging.Logger, config: Dict[str, Any], secretsFilter: Optional[SecretsFilter] = None
) -> None:
    """Configure individual logger from config file settings, every created handler gets secretsFilter."""

    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    if "level" in config:
        logLevel = getLogLevelByStr(config["level"])
        if logLevel is not None:
            localLogger.setLevel(logLevel)

    logLevel = localLogger.getEffectiveLevel()
    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))

    # Clear existing handlers to avoid duplicates
    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)

    if config.get("console", False):
        consoleHandler = logging.StreamHandler()
        consoleHandler.setLevel(getLogLevelByStr(config.get("console-level", ""), logLevel) or logLevel)
        consoleHandler.setFormatter(formatter)
        if secretsFilter is not None:
            consoleHandler.addFilter(secretsFilter)
        localLogger.addHandler(consoleHandler)
        logger.info(f"Logging {localLogger.name} to console, logLevel: {consoleHandler.level}")

    if "file" in config:
        logFile = config["file"]
        try:
            fileHandler = _createFileHandler(logFile, bool(config.get("rotate", False)))
            fileHandler.setLevel(getLogLevelByStr(config.get("file-level", ""), logLevel) or logLevel)
            fileHandler.setFormatter(formatter)
            if secretsFilter is not None:
                fileHandler.addFilter(secretsFilter)
            localLogger.addHandler(fileHandler)
            logger.info(f"Logging {localLogger.name} to file: {logFile}, logLevel: {fileHandler.level}")
        except OSError as e:
            logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")


def initLogging(config: Dict[str, Any], secrets: Iterable[str] = ()) -> None:
    """Configure logging from the [logging] config section."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.INFO)

    secretsFilter = SecretsFilter(secrets)
    configureLogger(rootLogger, config, secretsFilter)
    logLevel = rootLogger.getEffectiveLevel()

    # httpx logs every request URL (with the bot token in it) at INFO
    if logLevel < logging.WARNING:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("google_genai").setLevel(logging.WARNING)
    if logLevel < logging.INFO:
        logging.getLogger("telegram").setLevel(logging.INFO)
        logging.getLogger("aiohttp.access").setLevel(logging.INFO)

    logConfigs = config.get("logger", {})
    for loggerName, loggerConfig in logConfigs.items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig, secretsFilter)

    logger.info(f"Logging configured: root level={logging.getLevelName(logLevel)}")
