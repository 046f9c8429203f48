"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import io

import httpx
import typer
from PIL import Image, features
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.image_encoder import encode_jpeg
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import InvalidImageError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    # Reachability only: no key is sent, so any HTTP status counts as reachable.
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc) or type(exc).__name__


def _check_jpeg() -> tuple[bool, str]:
    """Encode a tiny image to detect a Pillow build without JPEG support."""

    if not features.check("jpg"):
        return False, "Pillow was built without libjpeg"
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (34, 139, 34)).save(buffer, format="PNG")
    try:
        encode_jpeg(buffer.getvalue())
    except InvalidImageError as exc:
        return False, exc.description
    return True, "OK"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Plant Identifier Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    has_key = bool(settings.gemini_api_key)
    if has_key:
        table.add_row("Gemini key", "OK", "PLANT_ID_GEMINI_API_KEY is set")
    else:
        table.add_row("Gemini key", "MISSING", "Run `plant-id doctor setup-key`")
    table.add_row("Endpoint", "OK", settings.gemini_base_url)

    ok_jpeg, detail_jpeg = _check_jpeg()
    table.add_row("Pillow JPEG", "OK" if ok_jpeg else "FAIL", detail_jpeg)

    ok_http, detail_http = asyncio.run(_check_http(settings.gemini_base_url, settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not has_key:
        _console.print("\n[yellow]Note:[/yellow] Without a key every identification fails with an API error.")


@app.command(name="setup-key")
def setup_key() -> None:
    """Interactive key setup (stores it in the user config .env)."""

    api_key = typer.prompt("Gemini API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("api key is required")

    env_path = write_user_env_vars({"PLANT_ID_GEMINI_API_KEY": api_key})
    _console.print(f"[green]Saved Gemini config to:[/green] {env_path}")
