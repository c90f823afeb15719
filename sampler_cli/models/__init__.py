"""
Data Models Layer.

This package contains the Pydantic models and records that define the core data
structures used throughout the application: configuration, mode parameters and
session state.
"""

from .config import ServiceConfig
from .params import (
    ModeForm,
    ModeParameters,
    NormalizeParameters,
    OperationMode,
    SpliceParameters,
)
from .state import (
    CandidateFile,
    Failure,
    LifecyclePhase,
    ProcessingRequest,
    RequestOutcome,
    ResultSummary,
    SelectedFile,
    Success,
)

__all__ = [
    "CandidateFile",
    "Failure",
    "LifecyclePhase",
    "ModeForm",
    "ModeParameters",
    "NormalizeParameters",
    "OperationMode",
    "ProcessingRequest",
    "RequestOutcome",
    "ResultSummary",
    "SelectedFile",
    "ServiceConfig",
    "SpliceParameters",
    "Success",
]
