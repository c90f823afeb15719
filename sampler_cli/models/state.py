"""
Session state records: candidate and selected files, lifecycle phases and
request outcomes.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

import aiofiles

from .params import ModeParameters, OperationMode


class LifecyclePhase(Enum):
    """Coarse phases of a submission, as mirrored by the status readout."""

    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CandidateFile:
    """A file offered for selection, not yet validated."""

    name: str
    size: int
    last_modified: float
    handle: Path | bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        stat = os.stat(path)
        return cls(
            name=path.name,
            size=stat.st_size,
            last_modified=stat.st_mtime,
            handle=path,
        )

    @classmethod
    def from_bytes(
        cls, name: str, content: bytes, last_modified: float = 0.0
    ) -> "CandidateFile":
        return cls(
            name=name, size=len(content), last_modified=last_modified, handle=content
        )


@dataclass(frozen=True)
class SelectedFile:
    """The single validated file currently chosen for processing."""

    name: str
    size: int
    last_modified: float
    handle: Path | bytes = field(repr=False)

    @property
    def modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.last_modified)

    async def read(self) -> bytes:
        """Returns the file content, reading it from disk when backed by a path."""
        if isinstance(self.handle, bytes):
            return self.handle
        async with aiofiles.open(self.handle, "rb") as f:
            return await f.read()


@dataclass(frozen=True)
class ProcessingRequest:
    """Everything needed for one dispatch, captured by value."""

    mode: OperationMode
    file: SelectedFile
    parameters: ModeParameters


@dataclass(frozen=True)
class ResultSummary:
    """Human-readable description of a successful result."""

    title: str
    details: tuple[tuple[str, str], ...]

    def get(self, label: str) -> str | None:
        return dict(self.details).get(label)


@dataclass(frozen=True)
class Success:
    artifact: bytes = field(repr=False)
    filename: str
    summary: ResultSummary


@dataclass(frozen=True)
class Failure:
    message: str


RequestOutcome = Success | Failure
