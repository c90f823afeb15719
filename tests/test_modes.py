from __future__ import annotations

import pytest
from pydantic import ValidationError

from sampler_cli.core.modes import (
    NORMALIZED_AUDIO_ARCHIVE_NAME,
    NORMALIZED_SPLICES_ARCHIVE_NAME,
    SPLICE_ARCHIVE_NAME,
    ModeRegistry,
)
from sampler_cli.models.params import (
    ModeForm,
    NormalizeParameters,
    OperationMode,
    SpliceParameters,
)


def test_registry_covers_every_mode():
    assert set(ModeRegistry.modes()) == set(OperationMode)


def test_parameters_are_read_fresh_from_the_form(form):
    registry = ModeRegistry(form)
    first = registry.parameters_for(OperationMode.SPLICE)

    form.splice_count = 9
    second = registry.parameters_for(OperationMode.SPLICE)

    assert first == SpliceParameters(duration=2.0, count=4, reverse=False)
    assert second.count == 9
    assert first.count == 4


def test_no_range_checks_on_parameters():
    registry = ModeRegistry(
        ModeForm(splice_duration=-1.0, splice_count=0, target_level=7.5)
    )
    assert registry.parameters_for(OperationMode.SPLICE).duration == -1.0
    assert registry.parameters_for(OperationMode.NORMALIZE).target_level == 7.5


def test_parameters_are_immutable(form):
    params = ModeRegistry(form).parameters_for(OperationMode.NORMALIZE)
    with pytest.raises(ValidationError):
        params.target_level = 0.1


def test_string_mode_names_are_accepted(form):
    registry = ModeRegistry(form)
    assert registry.endpoint_for("normalize") == "/api/v1/audio/normalize/multipart"


def test_unknown_mode_raises():
    with pytest.raises(ValueError, match="Unknown operation mode"):
        ModeRegistry().parameters_for("reverb")


@pytest.mark.parametrize(
    ("mode", "params", "expected"),
    [
        (OperationMode.SPLICE, SpliceParameters(duration=1, count=2), SPLICE_ARCHIVE_NAME),
        (
            OperationMode.NORMALIZE,
            NormalizeParameters(target_level=0.5, apply_to_segments=True),
            NORMALIZED_SPLICES_ARCHIVE_NAME,
        ),
        (
            OperationMode.NORMALIZE,
            NormalizeParameters(target_level=0.5, apply_to_segments=False),
            NORMALIZED_AUDIO_ARCHIVE_NAME,
        ),
    ],
)
def test_artifact_names(mode, params, expected):
    assert ModeRegistry().artifact_name(mode, params) == expected


def test_splice_form_fields():
    fields = ModeRegistry().form_fields(
        OperationMode.SPLICE, SpliceParameters(duration=2.5, count=4, reverse=True)
    )
    assert fields == {"spliceDuration": "2.5", "spliceCount": "4", "reverse": "true"}


def test_normalize_form_fields():
    fields = ModeRegistry().form_fields(
        OperationMode.NORMALIZE,
        NormalizeParameters(target_level=0.8, apply_to_segments=False),
    )
    assert fields == {"targetLevel": "0.8", "applyToSplices": "false"}


def test_splice_summary():
    summary = ModeRegistry().summarize(
        OperationMode.SPLICE, SpliceParameters(duration=2.0, count=4), 2048
    )
    assert summary.title == "Splice Processing Complete"
    assert summary.get("Splices") == "4"
    assert summary.get("Duration") == "2"
    assert summary.get("Reverse") == "No"
    assert summary.get("File size") == "2.0 KB"


def test_normalize_summary():
    summary = ModeRegistry().summarize(
        OperationMode.NORMALIZE,
        NormalizeParameters(target_level=0.8, apply_to_segments=True),
        512,
    )
    assert summary.title == "Normalization Complete"
    assert summary.get("Target level") == "80%"
    assert summary.get("Mode") == "splices"
    assert summary.get("File size") == "0.5 KB"
