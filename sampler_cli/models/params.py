"""
Operation modes and the parameter records captured for each submission.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class OperationMode(str, Enum):
    """The processing operations offered by the audio service."""

    SPLICE = "splice"
    NORMALIZE = "normalize"


class SpliceParameters(BaseModel):
    """Parameters sent with a splice request."""

    model_config = ConfigDict(frozen=True)

    duration: float
    count: int
    reverse: bool = False


class NormalizeParameters(BaseModel):
    """Parameters sent with a normalize request."""

    model_config = ConfigDict(frozen=True)

    target_level: float
    apply_to_segments: bool = False


ModeParameters = SpliceParameters | NormalizeParameters


@dataclass
class ModeForm:
    """
    The editable values the user has entered for every mode.

    This is read at submission time and may change freely afterwards without
    affecting a request that has already been dispatched.
    """

    splice_duration: float = 1.0
    splice_count: int = 4
    reverse: bool = False
    target_level: float = 0.9
    apply_to_segments: bool = False
