"""
Core application engine for the request lifecycle.

This package contains the primary logic. The `RequestOrchestrator` acts as the
session coordinator, taking the file held by `FileIntake` and the parameters read
through the `ModeRegistry`, and routing each outcome to the presenters.
"""

from .intake import MAX_FILE_SIZE, SUPPORTED_SUFFIX, FileIntake
from .modes import ModeRegistry
from .orchestrator import RequestOrchestrator
from .presenters import ErrorPresenter, ResultPresenter, Severity, StatusReporter

__all__ = [
    "MAX_FILE_SIZE",
    "SUPPORTED_SUFFIX",
    "ErrorPresenter",
    "FileIntake",
    "ModeRegistry",
    "RequestOrchestrator",
    "ResultPresenter",
    "Severity",
    "StatusReporter",
]
