"""
Command line entry point

- show: serve the interactive diagram viewer
- export: write the diagram to an HTML or plotly JSON file
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .errors import DatasetError
from .models import DiagramData
from .parser.parser_json import ParserJson
from .parser.parser_mock import ParserMock
from .visualizer import DashApp, render
from .visualizer.canvas import get_canvas

app = typer.Typer(
    name="protocol-diagram",
    help="Render protocol sequence diagrams from check-in datasets",
    add_completion=False,
)

console = Console(stderr=True)
logger = logging.getLogger(__name__)


class CanvasName(str, Enum):
    timeline = "timeline"
    compact = "compact"


class OutputFormat(str, Enum):
    html = "html"
    json = "json"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(dataset: Optional[Path], mock: bool) -> DiagramData:
    if mock:
        logger.info("Using synthetic connection dataset")
        return ParserMock().parse()
    if dataset is None:
        console.print("[red]✗[/red] A dataset path is required unless --mock is given")
        raise typer.Exit(2)
    try:
        return ParserJson(path=dataset).parse()
    except DatasetError as exc:
        console.print(f"[red]✗[/red] Invalid dataset {dataset}: {exc}")
        raise typer.Exit(1) from exc


@app.command("show")
def show(
    dataset: Optional[Path] = typer.Argument(None, help="Dataset JSON file"),
    mock: bool = typer.Option(False, "--mock", help="Show a synthetic connection instead of a file"),
    host: str = typer.Option("127.0.0.1", "--host", help="Address to listen on"),
    port: int = typer.Option(8050, "--port", "-p", help="Port to listen on"),
    debug: bool = typer.Option(False, "--debug", help="Run the Dash server in debug mode"),
) -> None:
    """Serve the interactive diagram viewer."""
    data = _load(dataset, mock)
    DashApp(data, title=dataset.name if dataset else "Synthetic connection").run(
        host=host, port=port, debug=debug
    )


@app.command("export")
def export(
    dataset: Optional[Path] = typer.Argument(None, help="Dataset JSON file"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file"),
    canvas: CanvasName = typer.Option(CanvasName.timeline, "--canvas", "-c", help="Canvas preset"),
    fmt: OutputFormat = typer.Option(OutputFormat.html, "--format", "-f", help="Output format"),
    mock: bool = typer.Option(False, "--mock", help="Export a synthetic connection instead of a file"),
    no_trips: bool = typer.Option(False, "--no-trips", help="Do not draw trip lines"),
    straight: bool = typer.Option(False, "--straight", help="Draw trips as straight segments"),
) -> None:
    """Write the diagram to a standalone file."""
    data = _load(dataset, mock)
    fig = render(
        data,
        canvas=get_canvas(canvas.value),
        show_trips=not no_trips,
        smooth_trips=not straight,
    )

    output.parent.mkdir(parents=True, exist_ok=True)
    if fmt == OutputFormat.html:
        fig.write_html(str(output), include_plotlyjs="cdn")
    else:
        fig.write_json(str(output))
    console.print(f"[green]✓[/green] Diagram written to {output}")


if __name__ == "__main__":
    app()
