"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets `identify` and `doctor` reuse the same panels.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from core.domain.models import PlantIdentification


def print_banner(console: Console) -> None:
    """Print the welcome banner (skipped in JSON mode)."""

    title = Text("Plant Identifier", style="bold green")
    subtitle = Text("Photo in, plant name out • Gemini", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="green", padding=(1, 4)))


def build_plant_panel(result: PlantIdentification) -> Panel:
    """Panel presenting a `PlantIdentification`."""

    body = Text()
    body.append("Name: ", style="bold")
    body.append(result.name + "\n")
    body.append("Description: ", style="bold")
    body.append(result.description or "-")
    return Panel(body, title=Text("Identified plant", style="bold green"), border_style="green")


def build_error_text(message: str) -> Text:
    return Text(f"Error: {message}", style="red")
