"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.markup import escape


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("sampler_cli")
        logger.info("submission_started",
                    mode="splice",
                    file="track.wav",
                    size_mb=10.0)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"sampler_cli_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        """Format message for console output."""
        parts = [f"\\[{event}]"]
        for key, value in context.items():
            parts.append(escape(f"{key}={value}"))
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._emit(logging.WARNING, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RequestLogger:
    """Specialized logger for submission lifecycle events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def submission_started(
        self, mode: str, file_name: str, size_bytes: int, parameters: dict[str, Any]
    ):
        self.logger.debug(
            "submission_started",
            mode=mode,
            file=file_name,
            size_mb=round(size_bytes / (1024 * 1024), 2),
            parameters=parameters,
        )

    def submission_succeeded(
        self, mode: str, artifact_name: str, size_bytes: int, duration_s: float
    ):
        self.logger.debug(
            "submission_succeeded",
            mode=mode,
            artifact=artifact_name,
            size_bytes=size_bytes,
            duration_s=round(duration_s, 2),
        )

    def submission_failed(
        self, mode: str, error: str, status_code: int | None, duration_s: float
    ):
        self.logger.warning(
            "submission_failed",
            mode=mode,
            error=error,
            status_code=status_code,
            duration_s=round(duration_s, 2),
        )

    def submission_rejected(self, reason: str):
        """Log a submit() call refused before dispatch."""
        self.logger.debug("submission_rejected", reason=reason)

    def health_probe(self, online: bool, version: str | None = None):
        self.logger.debug("health_probe", online=online, version=version)


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, RequestLogger]:
    """
    Create all structured loggers.

    Returns:
        Tuple of (base_logger, request_logger)
    """
    base = StructuredLogger("sampler_cli", log_dir=log_dir, enable_json=enable_json)
    return base, RequestLogger(base)
