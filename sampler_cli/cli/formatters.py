"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sampler_cli.core.presenters import SEVERITY_COLORS, Severity
from sampler_cli.models.config import ServiceConfig
from sampler_cli.models.state import SelectedFile, Success
from sampler_cli.utils.formatting import format_megabytes


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "UnsupportedFormatError": [
            "• Only .wav files can be processed.",
            "• Convert the file to WAV first, e.g. with ffmpeg.",
        ],
        "FileTooLargeError": [
            "• Files must be 100MB or smaller.",
            "• Trim or downsample the recording before uploading.",
        ],
        "NoFileSelectedError": [
            "• Pass a WAV file path, or pipe one in with --stdin.",
        ],
        "StructuredFailureError": [
            "• The service rejected the request; check the parameters.",
            "• Run the command with -vv for the full request log.",
        ],
        "TransportFailureError": [
            "• Check that the audio service is running.",
            "• Verify `service_url` with `sampler-cli --show-config`.",
            "• Run `sampler-cli health` to test connectivity.",
        ],
        "ConfigurationError": [
            "• Review the values in your configuration file.",
            "• Run `sampler-cli init --force` to write a fresh one.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def format_error_message(message: str) -> Panel:
    """Formats a message reported by the service."""
    return Panel(
        Text(message),
        title="[bold red]Processing Failed[/bold red]",
        border_style="red",
        expand=False,
    )


def format_file_info(selected: SelectedFile) -> Text:
    text = Text()
    text.append(selected.name, style="bold")
    text.append(
        f"\nSize: {format_megabytes(selected.size)} | "
        f"Modified: {selected.modified_at:%Y-%m-%d %H:%M}",
        style="dim",
    )
    return text


def format_result_panel(result: Success) -> Panel:
    """Renders the summary of a successful request."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for label, value in result.summary.details:
        table.add_row(f"{label}:", value)
    table.add_row("Artifact:", result.filename)

    return Panel(
        table,
        title=f"[bold green]{result.summary.title}[/bold green]",
        border_style="green",
        expand=False,
    )


def format_status(message: str, severity: Severity) -> str:
    color = SEVERITY_COLORS[severity]
    return f"[{color}]{escape(message)}[/{color}]"


def print_config(config_path: Path, config: ServiceConfig, exists: bool):
    """Displays the effective configuration."""
    console = Console()
    content = ""
    for key in sorted(ServiceConfig.get_ini_keys()):
        content += f"{key} = {escape(str(getattr(config, key)))}\n"

    source = (
        f"[dim]{escape(str(config_path))}[/dim]"
        if exists
        else "[dim]built-in defaults[/dim]"
    )
    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ({source})",
            border_style="cyan",
        )
    )


def print_validation_table(config: ServiceConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Service URL:", escape(config.service_url))
    table.add_row(
        "Timeouts:", f"{config.timeout:g}s total, {config.connect_timeout:g}s connect"
    )
    table.add_row("Output Dir:", escape(config.output_dir))
    table.add_row(
        "Splice Defaults:",
        f"{config.splice_count} x {config.splice_duration:g}s"
        f"{' (reversed)' if config.reverse else ''}",
    )
    table.add_row(
        "Normalize Defaults:",
        f"{config.target_level * 100:.0f}% "
        f"({'splices' if config.apply_to_segments else 'whole file'})",
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Configuration is Valid[/bold green]",
            border_style="green",
            expand=False,
        )
    )
