"""
The request lifecycle: file selection, mode choice, single-flight submission and
routing of the outcome to the result or error view.
"""

import logging
import time
from collections.abc import Sequence
from typing import Protocol

from rich.markup import escape

from sampler_cli.exceptions import (
    AlreadyInFlightError,
    FileValidationError,
    NoFileSelectedError,
    ServiceError,
)
from sampler_cli.models.params import OperationMode
from sampler_cli.models.state import (
    CandidateFile,
    Failure,
    LifecyclePhase,
    ProcessingRequest,
    RequestOutcome,
    SelectedFile,
    Success,
)
from sampler_cli.utils.structured_logger import RequestLogger

from .intake import FileIntake
from .modes import ModeRegistry
from .presenters import ErrorPresenter, ResultPresenter, Severity, StatusReporter

log = logging.getLogger(__name__)


class ProcessingService(Protocol):
    async def process(self, request: ProcessingRequest) -> bytes: ...


class RequestOrchestrator:
    """
    Owns the session state and is its only writer.

    Phases: IDLE -> FILE_SELECTED -> SUBMITTING -> SUCCEEDED | FAILED, returning
    to FILE_SELECTED when a new file is chosen. At most one request is in flight
    per instance; this is checked here rather than left to whatever control
    triggers `submit()`.
    """

    def __init__(
        self,
        service: ProcessingService,
        intake: FileIntake | None = None,
        registry: ModeRegistry | None = None,
        result_presenter: ResultPresenter | None = None,
        error_presenter: ErrorPresenter | None = None,
        status: StatusReporter | None = None,
        request_logger: RequestLogger | None = None,
        mode: OperationMode = OperationMode.SPLICE,
    ):
        self.service = service
        self.intake = intake or FileIntake()
        self.registry = registry or ModeRegistry()
        self.results = result_presenter or ResultPresenter()
        self.errors = error_presenter or ErrorPresenter()
        self.status = status or StatusReporter()
        self.request_logger = request_logger

        self._mode = OperationMode(mode)
        self._phase = (
            LifecyclePhase.FILE_SELECTED if self.intake.has_file else LifecyclePhase.IDLE
        )
        self._in_flight = False

        self.intake.add_listener(self._on_file_selected)

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def active_mode(self) -> OperationMode:
        return self._mode

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def can_submit(self) -> bool:
        """Whether a submission control should currently be enabled."""
        return self.intake.has_file and not self._in_flight

    def _set_phase(self, phase: LifecyclePhase) -> None:
        self._phase = phase
        self.status.reflect(phase)

    def _on_file_selected(self, selected: SelectedFile) -> None:
        # An outstanding request keeps its own copy of the previous file.
        if not self._in_flight:
            self._set_phase(LifecyclePhase.FILE_SELECTED)

    # --- file intake -----------------------------------------------------

    def select_file(self, candidate: CandidateFile) -> SelectedFile:
        """Explicit selection. Validation errors are shown and re-raised."""
        try:
            return self.intake.pick(candidate)
        except FileValidationError as e:
            self._show_error(str(e))
            raise

    def drop_files(self, candidates: Sequence[CandidateFile]) -> SelectedFile | None:
        """Drag-and-drop selection. Validation errors are shown and re-raised."""
        try:
            return self.intake.drop(candidates)
        except FileValidationError as e:
            self._show_error(str(e))
            raise

    # --- modes -----------------------------------------------------------

    def set_mode(self, mode: OperationMode) -> None:
        """Changes which parameters the next submission reads."""
        self._mode = OperationMode(mode)
        log.debug(f"Active mode set to '{self._mode.value}'.")

    # --- presenters ------------------------------------------------------

    def _show_result(self, result: Success) -> None:
        self.errors.dismiss()
        self.results.show(result)

    def _show_error(self, message: str) -> None:
        self.results.clear()
        self.errors.show(message)

    def dismiss_error(self) -> None:
        """Hides the current error without touching the file or the mode."""
        self.errors.dismiss()

    # --- submission ------------------------------------------------------

    def _rejected(self, error: Exception) -> Exception:
        if self.request_logger:
            self.request_logger.submission_rejected(type(error).__name__)
        return error

    def _capture(self) -> ProcessingRequest:
        mode = self._mode
        return ProcessingRequest(
            mode=mode,
            file=self.intake.current,
            parameters=self.registry.parameters_for(mode),
        )

    async def submit(self) -> RequestOutcome:
        """
        Dispatches one request for the active mode and resolves its outcome.

        Raises:
            NoFileSelectedError: If no file has been selected.
            AlreadyInFlightError: If a previous submission has not resolved yet.
        """
        if self._in_flight:
            raise self._rejected(
                AlreadyInFlightError("A request is already being processed.")
            )
        if not self.intake.has_file:
            error = NoFileSelectedError("Please select an audio file first.")
            self._show_error(str(error))
            raise self._rejected(error)

        # Nothing above awaits, so no other submit() can slip in between the
        # check and this assignment.
        self._in_flight = True
        try:
            self.errors.dismiss()
            self.results.clear()

            request = self._capture()
            self._set_phase(LifecyclePhase.SUBMITTING)
            outcome = await self._dispatch(request)

            if isinstance(outcome, Success):
                self._show_result(outcome)
                self._set_phase(LifecyclePhase.SUCCEEDED)
            else:
                self._show_error(outcome.message)
                self._set_phase(LifecyclePhase.FAILED)
            return outcome
        except Exception as e:
            self._show_error(str(e) or type(e).__name__)
            self._set_phase(LifecyclePhase.FAILED)
            raise
        finally:
            self._in_flight = False

    async def _dispatch(self, request: ProcessingRequest) -> RequestOutcome:
        mode = request.mode.value
        if self.request_logger:
            self.request_logger.submission_started(
                mode,
                request.file.name,
                request.file.size,
                request.parameters.model_dump(),
            )

        start_time = time.monotonic()
        try:
            artifact = await self.service.process(request)
        except ServiceError as e:
            if self.request_logger:
                self.request_logger.submission_failed(
                    mode, e.message, e.status, time.monotonic() - start_time
                )
            log.debug(
                f"Request for '{escape(request.file.name)}' failed: "
                f"{escape(e.message)}"
            )
            return Failure(message=e.message)

        filename = self.registry.artifact_name(request.mode, request.parameters)
        summary = self.registry.summarize(
            request.mode, request.parameters, len(artifact)
        )
        if self.request_logger:
            self.request_logger.submission_succeeded(
                mode, filename, len(artifact), time.monotonic() - start_time
            )
        return Success(artifact=artifact, filename=filename, summary=summary)

    # --- service status --------------------------------------------------

    async def probe_service(self, client) -> bool:
        """Runs the one-shot reachability check for the status readout."""
        online = await self.status.probe(client)
        if self.request_logger:
            self.request_logger.health_probe(online, self.status.service_version)
        return online

    def mark_downloaded(self) -> None:
        self.status.update("Download started!", Severity.SUCCESS)
