"""
Validates candidate files and holds the single file selected for processing.
"""

import logging
from collections.abc import Callable, Sequence

from rich.markup import escape

from sampler_cli.exceptions import FileTooLargeError, UnsupportedFormatError
from sampler_cli.models.state import CandidateFile, SelectedFile
from sampler_cli.utils.formatting import format_size

log = logging.getLogger(__name__)

SUPPORTED_SUFFIX = ".wav"
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MiB


class FileIntake:
    """
    Accepts files from either entry point (explicit pick or drag-and-drop),
    validates them, and keeps the latest valid one.
    """

    def __init__(self, max_size: int = MAX_FILE_SIZE):
        self.max_size = max_size
        self._current: SelectedFile | None = None
        self._listeners: list[Callable[[SelectedFile], None]] = []

    @property
    def current(self) -> SelectedFile | None:
        """The currently selected file, if any."""
        return self._current

    @property
    def has_file(self) -> bool:
        return self._current is not None

    def add_listener(self, callback: Callable[[SelectedFile], None]) -> None:
        """Registers a callback invoked after every successful selection."""
        self._listeners.append(callback)

    def submit_candidate(self, candidate: CandidateFile) -> SelectedFile:
        """
        Validates a candidate and, if it passes, makes it the selected file.

        Raises:
            UnsupportedFormatError: If the name does not end in '.wav'.
            FileTooLargeError: If the file is larger than the size limit.
        """
        if not candidate.name.lower().endswith(SUPPORTED_SUFFIX):
            log.debug(f"Rejected '{escape(candidate.name)}': unsupported suffix.")
            raise UnsupportedFormatError(
                "Please select a WAV file. Other formats are not currently supported."
            )

        if candidate.size > self.max_size:
            log.debug(
                f"Rejected '{escape(candidate.name)}': "
                f"{format_size(candidate.size)} exceeds "
                f"the {format_size(self.max_size)} limit."
            )
            raise FileTooLargeError("File size must be less than 100MB.")

        selected = SelectedFile(
            name=candidate.name,
            size=candidate.size,
            last_modified=candidate.last_modified,
            handle=candidate.handle,
        )
        self._current = selected
        log.debug(
            f"Selected '{escape(selected.name)}' ({format_size(selected.size)})."
        )

        for callback in self._listeners:
            callback(selected)
        return selected

    def pick(self, candidate: CandidateFile) -> SelectedFile:
        """Entry point for an explicit file selection."""
        return self.submit_candidate(candidate)

    def drop(self, candidates: Sequence[CandidateFile]) -> SelectedFile | None:
        """Entry point for drag-and-drop. Only the first dropped file is used."""
        if not candidates:
            return None
        if len(candidates) > 1:
            log.debug(
                f"{len(candidates)} files dropped; "
                f"using '{escape(candidates[0].name)}'."
            )
        return self.submit_candidate(candidates[0])
