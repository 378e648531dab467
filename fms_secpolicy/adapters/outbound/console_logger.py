"""Console Logger Adapter - Human-readable logs on stderr."""
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from fms_secpolicy.adapters.outbound.leveled_logger import DEFAULT_LOG_LEVEL, LeveledLogger

LEVEL_COLORS = {
    "DEBUG": "\033[36m",    # Cyan
    "INFO": "\033[32m",     # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",    # Red
}
RESET = "\033[0m"


class ConsoleLogger(LeveledLogger):
    """
    LoggerPort for CLI runs.

    Writes one line per record to stderr, keeping stdout free for
    ``render --stdout``. Structured fields are appended as ``key=value``.
    """

    PREFIX = "[fms-secpolicy]"

    def __init__(
        self,
        level: str = DEFAULT_LOG_LEVEL,
        use_colors: bool = True,
        stream: TextIO | None = None,
    ):
        """
        Args:
            level: Minimum log level to output (DEBUG, INFO, WARNING, ERROR)
            use_colors: Color the level name when the stream is a terminal
            stream: Output stream (stderr when not given)
        """
        super().__init__(level)
        self._stream = stream
        self._use_colors = use_colors and self._get_stream().isatty()

    def _get_stream(self) -> TextIO:
        # Resolved per call so click's CliRunner can swap sys.stderr
        return self._stream or sys.stderr

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        if self._use_colors:
            level = f"{LEVEL_COLORS.get(level, '')}{level}{RESET}"

        line = f"{self.PREFIX} {timestamp} {level}: {message}"
        if fields:
            line += " (" + " | ".join(f"{k}={v}" for k, v in fields.items()) + ")"

        print(line, file=self._get_stream())
