"""
Logging setup for the OpenAI Responses gateway using Python's standard
logging with JSON formatting for structured logs.

Log destinations:
- Console (stderr): Human-readable format for debugging
- <log_dir>/errors.jsonl: JSON format for error tracking
- <log_dir>/<YYYY-MM-DD>/<api>.log: JSON lines, one per OpenAI interaction
  or streaming event (written by InteractionLogger)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pythonjsonlogger import json as jsonlogger

from core.constants import (
    LOG_BACKUP_COUNT_ERRORS,
    LOG_BACKUP_COUNT_INTERACTIONS,
    LOG_DELTA_PREVIEW_LENGTH,
    LOG_MAX_SIZE,
    get_settings,
)
from models.log_models import InteractionLogEntry, StreamingLogEntry
from utils.json_utils import json_safe


class ErrorFilter(logging.Filter):
    """Filter to only allow ERROR and CRITICAL logs"""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


class ColoredConsoleFormatter(logging.Formatter):
    """
    Custom formatter that adds colors to log levels and standardizes format.
    Format: HH:MM:SS [LEVEL] logger_name - message
    """

    # ANSI color codes
    GREY = "\x1b[38;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    # We only color the level part: [LEVEL]
    def format(self, record: logging.LogRecord) -> str:
        level_fmt = f"[{record.levelname}]"
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            level_fmt = f"{color}{level_fmt}{self.RESET}"

        record.asctime = self.formatTime(record, "%H:%M:%S")
        return f"{record.asctime} {level_fmt} {record.name} - {record.getMessage()}"


def _resolve_log_dir() -> Path:
    log_dir = Path(get_settings().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logging(name: str = "responses-gateway", debug: bool | None = None) -> logging.Logger:
    """
    Set up application logging with console and JSON error handlers.

    Args:
        name: Logger name
        debug: Enable debug logging (overrides settings)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level

    # Remove any existing handlers
    logger.handlers = []

    settings = get_settings()
    if debug is None:
        debug = bool(settings.debug)

    # --- Console Handler (Human-readable) ---
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else getattr(logging, str(settings.log_level), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter())
    logger.addHandler(console_handler)

    # --- Error Log Handler (JSON) ---
    error_handler = logging.handlers.RotatingFileHandler(
        _resolve_log_dir() / "errors.jsonl",
        maxBytes=LOG_MAX_SIZE,
        backupCount=LOG_BACKUP_COUNT_ERRORS,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.addFilter(ErrorFilter())
    error_handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(name)s %(message)s",
            timestamp=True,
        )
    )
    logger.addHandler(error_handler)

    return logger


class AppLogger:
    """
    High-level logging interface for the gateway.
    Wraps standard Python logging with convenience methods that accept
    structured fields as keyword arguments.
    """

    def __init__(self, name: str = "responses-gateway"):
        self.logger = setup_logging(name)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Debug level logging"""
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Info level logging"""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Warning level logging"""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Error level logging with optional exception info"""
        self.logger.error(message, extra=kwargs, exc_info=exc_info)


# Global logger instance
logger = AppLogger()


class InteractionLogger:
    """Sink for OpenAI interaction and streaming records.

    Each record becomes one JSON line in ``<log_dir>/<YYYY-MM-DD>/<api>.log``.
    Handlers are created lazily per (date, api) and rotated by size.
    """

    def __init__(self, log_dir: str | Path | None = None, echo: bool | None = None):
        self.log_dir = Path(log_dir) if log_dir is not None else Path(get_settings().log_dir)
        self.echo = bool(get_settings().debug) if echo is None else echo
        self._loggers: dict[tuple[str, str], logging.Logger] = {}

    def _get_api_logger(self, api: str) -> logging.Logger:
        day = datetime.now(UTC).strftime("%Y-%m-%d")
        key = (day, api)
        if key in self._loggers:
            return self._loggers[key]

        # Drop handlers from previous days for this api
        for stale_key in [k for k in self._loggers if k[1] == api]:
            for handler in self._loggers.pop(stale_key).handlers:
                handler.close()

        day_dir = self.log_dir / day
        day_dir.mkdir(parents=True, exist_ok=True)

        api_logger = logging.getLogger(f"responses-gateway.interactions.{api}.{day}")
        api_logger.setLevel(logging.INFO)
        api_logger.propagate = False
        api_logger.handlers = []

        handler = logging.handlers.RotatingFileHandler(
            day_dir / f"{api}.log",
            maxBytes=LOG_MAX_SIZE,
            backupCount=LOG_BACKUP_COUNT_INTERACTIONS,
            encoding="utf-8",
        )
        handler.setFormatter(jsonlogger.JsonFormatter("%(message)s", json_default=str))
        api_logger.addHandler(handler)

        self._loggers[key] = api_logger
        return api_logger

    def _write(self, api: str, kind: str, record: dict[str, Any]) -> None:
        try:
            # Round-trip through json_safe so SDK objects become plain values
            self._get_api_logger(api).info(kind, extra={"record": _plain(record)})
        except OSError as e:
            logger.error(f"Failed to write {api} interaction log: {e}", exc_info=True)

    def log_openai_interaction(self, entry: InteractionLogEntry) -> None:
        """Write one request/response record."""
        self._write(entry.api, "openai_interaction", entry.to_dict())

        if not self.echo:
            return
        if entry.error:
            logger.error(f"OpenAI {entry.api} {entry.endpoint} failed: {entry.error.message}")
        else:
            parts = [f"OpenAI {entry.api} {entry.endpoint} ok"]
            if latency := entry.metadata.get("latency_ms"):
                parts.append(f"[{latency}ms]")
            if tokens := entry.metadata.get("tokens_used"):
                parts.append(f"[{tokens} tokens]")
            logger.info(" ".join(parts))

    def log_streaming_event(self, entry: StreamingLogEntry) -> None:
        """Write one streaming record."""
        self._write(entry.api, "streaming_event", entry.to_dict())

        if not self.echo:
            return
        message = f"Stream {entry.event_type} #{entry.sequence} ({entry.endpoint})"
        if entry.delta:
            preview = entry.delta[:LOG_DELTA_PREVIEW_LENGTH]
            if len(entry.delta) > LOG_DELTA_PREVIEW_LENGTH:
                preview += "..."
            message += f" delta={preview!r}"
        if entry.error:
            logger.error(f"{message} error={entry.error.message}")
        else:
            logger.debug(message)


def _plain(record: dict[str, Any]) -> Any:
    return json.loads(json_safe(record))
