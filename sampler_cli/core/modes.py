"""
Static registry of operation modes: how each one reads its parameters, which
service endpoint it targets, how its artifact is named and how its result is
summarised.
"""

from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType

from sampler_cli.models.params import (
    ModeForm,
    ModeParameters,
    NormalizeParameters,
    OperationMode,
    SpliceParameters,
)
from sampler_cli.models.state import ResultSummary
from sampler_cli.utils.formatting import (
    format_kilobytes,
    format_number,
    format_percentage,
    yes_no,
)

SPLICE_ARCHIVE_NAME = "audio_splices.zip"
NORMALIZED_SPLICES_ARCHIVE_NAME = "normalized_splices.zip"
NORMALIZED_AUDIO_ARCHIVE_NAME = "normalized_audio.zip"


def _read_splice(form: ModeForm) -> SpliceParameters:
    return SpliceParameters(
        duration=form.splice_duration,
        count=form.splice_count,
        reverse=form.reverse,
    )


def _read_normalize(form: ModeForm) -> NormalizeParameters:
    return NormalizeParameters(
        target_level=form.target_level,
        apply_to_segments=form.apply_to_segments,
    )


def _splice_fields(params: SpliceParameters) -> dict[str, str]:
    return {
        "spliceDuration": format_number(params.duration),
        "spliceCount": str(params.count),
        "reverse": "true" if params.reverse else "false",
    }


def _normalize_fields(params: NormalizeParameters) -> dict[str, str]:
    return {
        "targetLevel": format_number(params.target_level),
        "applyToSplices": "true" if params.apply_to_segments else "false",
    }


def _splice_name(params: SpliceParameters) -> str:
    return SPLICE_ARCHIVE_NAME


def _normalize_name(params: NormalizeParameters) -> str:
    if params.apply_to_segments:
        return NORMALIZED_SPLICES_ARCHIVE_NAME
    return NORMALIZED_AUDIO_ARCHIVE_NAME


def _splice_summary(params: SpliceParameters, artifact_size: int) -> ResultSummary:
    return ResultSummary(
        title="Splice Processing Complete",
        details=(
            ("Splices", str(params.count)),
            ("Duration", format_number(params.duration)),
            ("Reverse", yes_no(params.reverse)),
            ("File size", format_kilobytes(artifact_size)),
        ),
    )


def _normalize_summary(
    params: NormalizeParameters, artifact_size: int
) -> ResultSummary:
    return ResultSummary(
        title="Normalization Complete",
        details=(
            ("Target level", format_percentage(params.target_level)),
            ("Mode", "splices" if params.apply_to_segments else "whole file"),
            ("File size", format_kilobytes(artifact_size)),
        ),
    )


@dataclass(frozen=True)
class ModeEntry:
    """Everything the orchestrator needs to know about one mode."""

    endpoint: str
    read: Callable[[ModeForm], ModeParameters]
    form_fields: Callable[[ModeParameters], dict[str, str]]
    artifact_name: Callable[[ModeParameters], str]
    summarize: Callable[[ModeParameters, int], ResultSummary]


MODE_TABLE: MappingProxyType[OperationMode, ModeEntry] = MappingProxyType(
    {
        OperationMode.SPLICE: ModeEntry(
            endpoint="/api/v1/audio/splice/multipart",
            read=_read_splice,
            form_fields=_splice_fields,
            artifact_name=_splice_name,
            summarize=_splice_summary,
        ),
        OperationMode.NORMALIZE: ModeEntry(
            endpoint="/api/v1/audio/normalize/multipart",
            read=_read_normalize,
            form_fields=_normalize_fields,
            artifact_name=_normalize_name,
            summarize=_normalize_summary,
        ),
    }
)


class ModeRegistry:
    """
    Table-driven lookup from an operation mode to its behaviour.

    Parameters are read from the bound form on every call; nothing is cached and
    no range checks are made, since the service decides what is acceptable.
    """

    def __init__(self, form: ModeForm | None = None):
        self.form = form if form is not None else ModeForm()

    @staticmethod
    def modes() -> tuple[OperationMode, ...]:
        return tuple(MODE_TABLE)

    @staticmethod
    def entry(mode: OperationMode) -> ModeEntry:
        try:
            return MODE_TABLE[OperationMode(mode)]
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown operation mode: {mode!r}") from e

    def parameters_for(self, mode: OperationMode) -> ModeParameters:
        return self.entry(mode).read(self.form)

    def endpoint_for(self, mode: OperationMode) -> str:
        return self.entry(mode).endpoint

    def form_fields(
        self, mode: OperationMode, parameters: ModeParameters
    ) -> dict[str, str]:
        """Encodes parameters as the text fields the service expects."""
        return self.entry(mode).form_fields(parameters)

    def artifact_name(self, mode: OperationMode, parameters: ModeParameters) -> str:
        return self.entry(mode).artifact_name(parameters)

    def summarize(
        self, mode: OperationMode, parameters: ModeParameters, artifact_size: int
    ) -> ResultSummary:
        return self.entry(mode).summarize(parameters, artifact_size)
