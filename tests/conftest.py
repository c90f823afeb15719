from __future__ import annotations

import asyncio
import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from sampler_cli.core import FileIntake, ModeRegistry, RequestOrchestrator
from sampler_cli.models.params import ModeForm
from sampler_cli.models.state import CandidateFile, ProcessingRequest

MB = 1024 * 1024


def wav(name: str = "track.wav", size: int = 10 * MB) -> CandidateFile:
    """A candidate whose reported size need not match its (tiny) content."""
    return CandidateFile(name=name, size=size, last_modified=0.0, handle=b"RIFF")


class FakeService:
    """Stands in for the HTTP client; can hold a request open until released."""

    def __init__(self, artifact: bytes = b"PK\x03\x04zip", error: Exception | None = None):
        self.artifact = artifact
        self.error = error
        self.requests: list[ProcessingRequest] = []
        self.in_progress = 0
        self.max_in_progress = 0
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()

    def hold(self) -> None:
        self.gate = asyncio.Event()

    def release(self) -> None:
        assert self.gate is not None
        self.gate.set()

    async def process(self, request: ProcessingRequest) -> bytes:
        self.requests.append(request)
        self.in_progress += 1
        self.max_in_progress = max(self.max_in_progress, self.in_progress)
        self.entered.set()
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            return self.artifact
        finally:
            self.in_progress -= 1


@pytest.fixture
def form() -> ModeForm:
    return ModeForm(
        splice_duration=2.0,
        splice_count=4,
        reverse=False,
        target_level=0.8,
        apply_to_segments=True,
    )


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def orchestrator(service: FakeService, form: ModeForm) -> RequestOrchestrator:
    return RequestOrchestrator(
        service, intake=FileIntake(), registry=ModeRegistry(form)
    )


@pytest.fixture
def markup_log():
    """Routes 'sampler_cli' logs at DEBUG through a markup-enabled RichHandler."""
    buffer = io.StringIO()
    handler = RichHandler(
        console=Console(file=buffer, width=200), markup=True, show_path=False
    )
    logger = logging.getLogger("sampler_cli")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield buffer
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
