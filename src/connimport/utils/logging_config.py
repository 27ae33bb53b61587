"""Logging configuration for connimport."""

import json
import logging
import logging.handlers
import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

ROOT_LOGGER_NAME = "connimport"


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output formats."""

    SIMPLE = "simple"
    JSON = "json"


@dataclass
class LoggingConfig:
    """Configuration for logging system.

    Console output follows ``level``. When ``log_file`` is set, JSON records
    at ``file_level`` and above are also written to that file, which is
    rotated once it reaches ``max_file_size_mb``.
    """

    level: LogLevel = LogLevel.WARNING
    format_type: LogFormat = LogFormat.SIMPLE
    enable_console_logging: bool = True
    console_colors: bool = True
    log_file: Optional[str] = None
    file_level: LogLevel = LogLevel.INFO
    max_file_size_mb: int = 10
    backup_count: int = 5
    sensitive_data_patterns: List[str] = field(
        default_factory=lambda: [r"password", r"token", r"secret"]
    )


class SensitiveDataFilter(logging.Filter):
    """Filter to redact credential values from log messages."""

    def __init__(self, patterns: List[str]) -> None:
        """
        Initialize the filter with sensitive key patterns.

        Args:
            patterns: Regex patterns matching the names of sensitive values
        """
        super().__init__()
        self.patterns = patterns
        self.compiled_patterns = [
            re.compile(rf"({pattern}\w*['\"]?\s*[=:]\s*['\"]?)[^\s'\",&]+", re.IGNORECASE)
            for pattern in patterns
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact sensitive values in place; never drops a record."""
        if isinstance(record.msg, str):
            record.msg = self._redact_sensitive_data(record.msg)

        if record.args:
            record.args = tuple(
                self._redact_sensitive_data(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True

    def _redact_sensitive_data(self, text: str) -> str:
        for pattern in self.compiled_patterns:
            text = pattern.sub(r"\1[REDACTED]", text)
        return text


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """One-line console formatter, coloring the level name on terminals."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream=None) -> None:
        super().__init__(fmt="%(levelname)-8s %(name)s: %(message)s")
        stream = stream or sys.stderr
        is_terminal = getattr(stream, "isatty", lambda: False)()
        self.use_colors = use_colors and is_terminal and os.environ.get("TERM") != "dumb"

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        color = self.LEVEL_COLORS.get(record.levelname)
        if self.use_colors and color:
            return f"{color}{line}{self.RESET}"
        return line


class LoggingManager:
    """
    Installs the handlers described by a LoggingConfig.

    Handlers are attached to the ``connimport`` logger so that module
    loggers created with ``logging.getLogger(__name__)`` inherit them.
    """

    def __init__(self, config: Optional[LoggingConfig] = None):
        self.config = config or LoggingConfig()
        self.handlers: List[logging.Handler] = []

    def setup_logging(self) -> None:
        """Replace the package logger's handlers with the configured ones."""
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        self.handlers = []
        if self.config.enable_console_logging:
            self.handlers.append(self._console_handler())
        if self.config.log_file:
            self.handlers.append(self._file_handler(Path(self.config.log_file).expanduser()))

        if self.config.sensitive_data_patterns:
            redactor = SensitiveDataFilter(self.config.sensitive_data_patterns)
            for handler in self.handlers:
                handler.addFilter(redactor)

        for handler in self.handlers:
            package_logger.addHandler(handler)

        # The logger passes everything any handler wants; handlers filter by level
        package_logger.setLevel(
            min((handler.level for handler in self.handlers), default=logging.WARNING)
        )
        package_logger.propagate = False

        logging.getLogger("aiohttp").setLevel(logging.WARNING)

    def _console_handler(self) -> logging.Handler:
        # stderr keeps command output on stdout machine-readable
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(self.config.level.value)
        if self.config.format_type == LogFormat.JSON:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(ConsoleFormatter(self.config.console_colors, sys.stderr))
        return handler

    def _file_handler(self, path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=self.config.max_file_size_mb * 1024 * 1024,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(self.config.file_level.value)
        handler.setFormatter(StructuredFormatter())
        return handler


# Global logging manager instance
_global_logging_manager: Optional[LoggingManager] = None


def get_logging_manager() -> LoggingManager:
    """Get the global logging manager instance."""
    global _global_logging_manager
    if _global_logging_manager is None:
        _global_logging_manager = LoggingManager()
    return _global_logging_manager


def setup_logging(config: Optional[LoggingConfig] = None) -> LoggingManager:
    """
    Set up logging for connimport, replacing any previous configuration.

    Args:
        config: Logging configuration
    """
    global _global_logging_manager
    _global_logging_manager = LoggingManager(config)
    _global_logging_manager.setup_logging()
    return _global_logging_manager
