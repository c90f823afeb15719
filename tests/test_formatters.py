from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.text import Text

from sampler_cli.cli.formatters import format_file_info, format_status, print_config
from sampler_cli.core.presenters import Severity
from sampler_cli.models.config import ServiceConfig
from sampler_cli.models.state import SelectedFile

from .conftest import MB


def test_file_info_shows_name_and_modification_time():
    modified = datetime(2024, 5, 6, 7, 8)
    selected = SelectedFile(
        name="take[1].wav",
        size=2 * MB,
        last_modified=modified.timestamp(),
        handle=b"",
    )

    text = format_file_info(selected).plain

    assert text.startswith("take[1].wav\n")
    assert "Modified: 2024-05-06 07:08" in text


def test_status_text_is_not_parsed_as_markup():
    rendered = format_status("API Online - v2.0[/beta]", Severity.SUCCESS)

    assert Text.from_markup(rendered).plain == "API Online - v2.0[/beta]"


def test_print_config_shows_bracketed_values(tmp_path, monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr("sampler_cli.cli.formatters.Console", lambda: console)

    print_config(tmp_path / "config.ini", ServiceConfig(output_dir="out[/x]"), False)

    assert "output_dir = out[/x]" in console.export_text()
