"""
Defines the command-line interface for the application using Typer.
Files can be given as an argument or piped in on stdin.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler

from sampler_cli import __version__
from sampler_cli.api.client import AudioServiceClient
from sampler_cli.core import (
    FileIntake,
    ModeRegistry,
    RequestOrchestrator,
    StatusReporter,
)
from sampler_cli.exceptions import ConfigurationError, SamplerCliError
from sampler_cli.models.config import ServiceConfig
from sampler_cli.models.params import OperationMode
from sampler_cli.models.state import CandidateFile, Failure
from sampler_cli.storage.config_manager import ConfigManager
from sampler_cli.utils.structured_logger import create_structured_logger

from .formatters import (
    format_error_message,
    format_error_with_suggestions,
    format_file_info,
    format_result_panel,
    format_status,
    print_config,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("sampler_cli")

app = typer.Typer(
    name="sampler-cli",
    help=(
        "Splice and normalize WAV files with the audio processing service. Use"
        " 'sampler-cli <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "sampler-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> ServiceConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except ConfigurationError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
):
    """Audio Sampler CLI"""
    if version:
        console.print(f"[bold]sampler-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("sampler_cli").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, _load_config(), CONFIG_FILE.is_file())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    service_url: str = typer.Option(
        "http://localhost:8080", "--service-url", "-u", help="Audio service base URL."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config({"service_url": service_url})
    except ConfigurationError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(
        f"\n[bold green]✓ Configuration saved to "
        f"'{escape(str(CONFIG_FILE))}'[/bold green]"
    )
    console.print("Try: [cyan]sampler-cli splice track.wav --count 4[/cyan]")


def _read_paths_from_stdin() -> list[Path]:
    """Reads dropped file paths from stdin, one per line."""
    if sys.stdin.isatty():
        console.print(
            "[yellow]⚠️  No input detected on stdin. Pipe a file path in.[/yellow]"
        )
        console.print(
            "[dim]Example:[/dim]\n  [cyan]ls *.wav | sampler-cli splice --stdin[/cyan]"
        )
        raise typer.Exit(code=1)

    paths = []
    for line in sys.stdin:
        line = line.strip()
        if line and not line.startswith("#"):
            paths.append(Path(line))
    return paths


def _candidates(paths: list[Path]) -> list[CandidateFile]:
    candidates = []
    for path in paths:
        try:
            candidates.append(CandidateFile.from_path(path))
        except OSError as e:
            console.print(
                f"[red]✗ Cannot read '{escape(str(path))}': {e.strerror}[/red]"
            )
            raise typer.Exit(code=1) from e
    return candidates


def _run_job(
    mode: OperationMode,
    file: Path | None,
    stdin: bool,
    overrides: dict,
    output_dir: Path | None,
) -> None:
    """Select, submit, show and save one request for `mode`."""
    if stdin and file:
        console.print(
            "[yellow]⚠️  Both a file and --stdin provided. Using --stdin only.[/yellow]"
        )

    config = _load_config(
        {key: value for key, value in overrides.items() if value is not None}
    )
    destination = output_dir or Path(config.output_dir)

    async def _job_async() -> bool:
        base_logger, request_logger = create_structured_logger(
            CONFIG_DIR / "logs", enable_json=config.json_logs
        )
        base_logger.set_session_context(mode=mode.value, version=__version__)
        status = StatusReporter()
        status.add_listener(
            lambda message, severity: log.info(format_status(message, severity))
        )
        registry = ModeRegistry(config.to_form())

        with base_logger:
            async with AudioServiceClient(
                config.service_url,
                timeout=config.timeout,
                connect_timeout=config.connect_timeout,
                registry=registry,
            ) as client:
                orchestrator = RequestOrchestrator(
                    client,
                    intake=FileIntake(),
                    registry=registry,
                    status=status,
                    request_logger=request_logger,
                    mode=mode,
                )

                await orchestrator.probe_service(client)
                console.print(
                    format_status(status.service_status, status.service_severity)
                )

                try:
                    if stdin:
                        orchestrator.drop_files(_candidates(_read_paths_from_stdin()))
                    elif file is not None:
                        orchestrator.select_file(_candidates([file])[0])
                    if orchestrator.intake.current:
                        console.print(format_file_info(orchestrator.intake.current))

                    with console.status(f"[bold cyan]Processing ({mode.value})..."):
                        outcome = await orchestrator.submit()
                except SamplerCliError as e:
                    console.print(format_error_with_suggestions(e))
                    return False

                if isinstance(outcome, Failure):
                    console.print(format_error_message(outcome.message))
                    return False

                console.print(format_result_panel(outcome))
                saved = await orchestrator.results.download(destination)
                orchestrator.mark_downloaded()
                console.print(f"[green]✓ Saved to '{escape(str(saved))}'[/green]")
                return True

    if not asyncio.run(_job_async()):
        raise typer.Exit(code=1)


@app.command()
def splice(
    file: Path | None = typer.Argument(None, help="WAV file to splice."),  # noqa: B008
    duration: float | None = typer.Option(
        None, "--duration", "-d", help="Length of each splice in seconds."
    ),
    count: int | None = typer.Option(
        None, "--count", "-n", help="Number of splices to cut."
    ),
    reverse: bool | None = typer.Option(
        None, "--reverse/--no-reverse", help="Reverse every splice."
    ),
    output_dir: Path | None = typer.Option(  # noqa: B008
        None, "--output-dir", "-o", help="Directory to save the result archive in."
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read the file path from standard input."
    ),
):
    """Cut a WAV file into splices."""
    _run_job(
        OperationMode.SPLICE,
        file,
        stdin,
        {"splice_duration": duration, "splice_count": count, "reverse": reverse},
        output_dir,
    )


@app.command()
def normalize(
    file: Path | None = typer.Argument(None, help="WAV file to normalize."),  # noqa: B008
    target: float | None = typer.Option(
        None, "--target", "-t", help="Target peak level between 0 and 1."
    ),
    segments: bool | None = typer.Option(
        None,
        "--segments/--whole-file",
        help="Normalize each splice separately instead of the whole file.",
    ),
    output_dir: Path | None = typer.Option(  # noqa: B008
        None, "--output-dir", "-o", help="Directory to save the result archive in."
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read the file path from standard input."
    ),
):
    """Normalize a WAV file's level."""
    _run_job(
        OperationMode.NORMALIZE,
        file,
        stdin,
        {"target_level": target, "apply_to_segments": segments},
        output_dir,
    )


@app.command()
def health():
    """Check whether the audio service is reachable."""
    config = _load_config()

    async def _probe() -> bool:
        status = StatusReporter()
        async with AudioServiceClient(
            config.service_url,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
        ) as client:
            online = await status.probe(client)
        console.print(format_status(status.service_status, status.service_severity))
        return online

    if not asyncio.run(_probe()):
        console.print(f"[dim]Service URL: {escape(config.service_url)}[/dim]")
        raise typer.Exit(code=1)


@app.command()
def validate():
    """Validate the current configuration."""
    print_validation_table(_load_config())

