"""CloudWatch Logger Adapter - Structured JSON logs for Lambda."""
import json
from datetime import datetime, timezone
from typing import Any

from fms_secpolicy.adapters.outbound.leveled_logger import DEFAULT_LOG_LEVEL, LeveledLogger

SERVICE_NAME = "fms-secpolicy"


class CloudWatchLogger(LeveledLogger):
    """
    LoggerPort for Lambda runs.

    Prints one JSON object per record to stdout, which the Lambda runtime
    ships to CloudWatch Logs, so fields can be filtered with Logs Insights
    (e.g. ``filter message = "rendered_policy"``).
    """

    def __init__(self, level: str = DEFAULT_LOG_LEVEL, context: dict | None = None):
        """
        Args:
            level: Minimum log level to output
            context: Fields added to every record
        """
        super().__init__(level)
        self._context = {"service": SERVICE_NAME, **(context or {})}

    def set_context(self, **kwargs: Any) -> None:
        """Add fields (request_id, dry_run, ...) to every later record."""
        self._context.update(kwargs)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            **self._context,
            **fields,
        }
        print(json.dumps(record, default=str))
