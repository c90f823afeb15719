"""
Holders for what the user currently sees: the latest result, the latest error,
and the status readout.
"""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import aiofiles
from pathvalidate import sanitize_filename
from rich.markup import escape

from sampler_cli.exceptions import NoResultAvailableError
from sampler_cli.models.state import LifecyclePhase, Success

if TYPE_CHECKING:
    from sampler_cli.api.client import AudioServiceClient

log = logging.getLogger(__name__)


class ResultPresenter:
    """Keeps the most recent successful artifact until the next submission."""

    def __init__(self) -> None:
        self._current: Success | None = None

    @property
    def current(self) -> Success | None:
        return self._current

    @property
    def is_visible(self) -> bool:
        return self._current is not None

    def show(self, result: Success) -> None:
        self._current = result

    def clear(self) -> None:
        self._current = None

    async def download(self, directory: Path) -> Path:
        """
        Writes the current artifact into `directory` under its display filename.

        Can be called any number of times while the result is current.

        Raises:
            NoResultAvailableError: If no result is held.
        """
        result = self._current
        if result is None:
            raise NoResultAvailableError("There is no processed result to download.")

        directory.mkdir(parents=True, exist_ok=True)
        destination = directory / sanitize_filename(result.filename, platform="auto")
        async with aiofiles.open(destination, "wb") as f:
            await f.write(result.artifact)
        log.debug(
            f"Wrote {len(result.artifact)} bytes to '{escape(str(destination))}'."
        )
        return destination


class ErrorPresenter:
    """Keeps the most recent error message until dismissed or replaced."""

    def __init__(self) -> None:
        self._message: str | None = None

    @property
    def message(self) -> str | None:
        return self._message

    @property
    def is_visible(self) -> bool:
        return self._message is not None

    def show(self, message: str) -> None:
        self._message = message

    def dismiss(self) -> None:
        self._message = None


class Severity(Enum):
    INFO = "info"
    SUCCESS = "success"
    PROCESSING = "processing"
    ERROR = "error"


SEVERITY_COLORS = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.PROCESSING: "yellow",
    Severity.ERROR: "red",
}

PHASE_STATUS = {
    LifecyclePhase.IDLE: ("Select a WAV file to begin", Severity.INFO),
    LifecyclePhase.FILE_SELECTED: ("File ready for processing", Severity.SUCCESS),
    LifecyclePhase.SUBMITTING: ("Processing audio...", Severity.PROCESSING),
    LifecyclePhase.SUCCEEDED: ("Processing complete!", Severity.SUCCESS),
    LifecyclePhase.FAILED: ("Processing failed", Severity.ERROR),
}


class StatusReporter:
    """
    A passive status line. It mirrors what happened and never influences it.
    """

    def __init__(self) -> None:
        self.message, self.severity = PHASE_STATUS[LifecyclePhase.IDLE]
        self.service_status: str | None = None
        self.service_version: str | None = None
        self.service_severity: Severity | None = None
        self._listeners: list[Callable[[str, Severity], None]] = []

    def add_listener(self, callback: Callable[[str, Severity], None]) -> None:
        self._listeners.append(callback)

    def update(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.message = message
        self.severity = severity
        color = SEVERITY_COLORS[severity]
        log.debug(f"[{color}]{escape(message)}[/{color}]")
        for callback in self._listeners:
            callback(message, severity)

    def reflect(self, phase: LifecyclePhase) -> None:
        """Updates the readout to match a lifecycle phase."""
        message, severity = PHASE_STATUS[phase]
        self.update(message, severity)

    async def probe(self, client: "AudioServiceClient") -> bool:
        """
        Checks once whether the service is reachable. Failures only change the
        service readout.
        """
        try:
            health = await client.health()
        except Exception as e:
            self.service_status = "API Offline"
            self.service_version = None
            self.service_severity = Severity.ERROR
            log.debug(f"API health check failed: {escape(str(e))}")
            return False

        self.service_version = health.version
        self.service_status = f"API Online - v{health.version}"
        self.service_severity = Severity.SUCCESS
        return True
