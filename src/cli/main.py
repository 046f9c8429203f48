"""Plant identification CLI (Typer + Rich)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.status import Status

from adapters.gemini_service import GeminiService
from adapters.json_exporter import export_identification_json, identification_to_json
from cli import doctor
from cli.ui_components import build_error_text, build_plant_panel, print_banner
from core.config import AppSettings
from core.domain.models import RequestState, RequestStatus
from core.interfaces.identifier import PlantIdentifier
from core.services.identification_session import IdentificationSession

app = typer.Typer(no_args_is_help=True, help="Identify plants from photos with Gemini.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(*, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_identifier(settings: AppSettings) -> PlantIdentifier:
    return GeminiService(settings)


class _StatusBinding:
    """Shows a spinner while the session is in flight."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._status: Status | None = None

    def __call__(self, state: RequestState) -> None:
        if state.is_loading:
            if self._status is None:
                self._status = self._console.status("Identifying plant...", spinner="dots")
                self._status.start()
            return
        if self._status is not None:
            self._status.stop()
            self._status = None


@app.command()
def identify(
    image: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Photo of the plant (JPEG, PNG, WebP, ...).",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the result JSON to this file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Identify the plant shown in IMAGE."""

    configure_logging(verbose=verbose)

    try:
        image_bytes = image.read_bytes()
    except OSError as exc:
        raise typer.BadParameter(f"cannot read {image}: {exc}", param_hint="IMAGE") from exc

    settings = AppSettings()
    session = IdentificationSession(build_identifier(settings))

    if not json_output:
        print_banner(_console)
        session.subscribe(_StatusBinding(_err_console))

    state = asyncio.run(session.submit(image_bytes))

    result = state.result
    if state.status is not RequestStatus.SUCCEEDED or result is None:
        _err_console.print(build_error_text(state.error_message or "unknown error"))
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(identification_to_json(result), nl=False)
    else:
        _console.print(build_plant_panel(result))

    if output is not None:
        path = export_identification_json(result=result, output_path=output)
        if not json_output:
            _console.print(f"[green]Saved JSON to:[/green] {path}")


def run() -> None:
    app()
