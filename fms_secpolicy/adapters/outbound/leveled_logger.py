"""Shared level handling for the LoggerPort adapters."""
from typing import Any

LOG_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}
DEFAULT_LOG_LEVEL = "INFO"


def level_value(level: str) -> int:
    """Numeric value of a level name; unknown names map to INFO."""
    return LOG_LEVELS.get(level.upper(), LOG_LEVELS[DEFAULT_LOG_LEVEL])


class LeveledLogger:
    """
    Base for LoggerPort implementations.

    Handles level filtering and exception details; subclasses only decide
    how a record is written by implementing ``_emit``.
    """

    def __init__(self, level: str = DEFAULT_LOG_LEVEL):
        self._level = level_value(level)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._log("DEBUG", message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._log("INFO", message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._log("WARNING", message, kwargs)

    def error(self, message: str, exception: Exception | None = None, **kwargs: Any) -> None:
        """Log an error message, optionally with exception details."""
        if exception is not None:
            kwargs["error"] = str(exception)
            kwargs["error_type"] = type(exception).__name__
        self._log("ERROR", message, kwargs)

    def set_level(self, level: str) -> None:
        """Set the logging level."""
        self._level = level_value(level)

    def is_enabled_for(self, level: str) -> bool:
        return level_value(level) >= self._level

    def _log(self, level: str, message: str, fields: dict[str, Any]) -> None:
        if self.is_enabled_for(level):
            self._emit(level, message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError
