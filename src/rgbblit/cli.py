"""Command-line interface for rgbblit."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rgbblit.core.config import CanvasBackend, LauncherKind, Settings, get_settings
from rgbblit.core.constants import MAX_DIMENSION, PROGNAME
from rgbblit.core.errors import BlitError
from rgbblit.pipeline.pipeline import Coordinator

app = typer.Typer(
    name=PROGNAME,
    help="Render a raw RGB file in parallel.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

USAGE = f"usage: {PROGNAME} NUM_WORKERS INPUT_FILE [FILTERS]"


def _apply_overrides(
    settings: Settings,
    width: int | None,
    height: int | None,
    canvas: CanvasBackend | None,
    output: Path | None,
    launcher: LauncherKind | None,
    batch_size: int | None,
    byte_exact: bool,
    no_wait: bool,
    verbose: bool,
) -> Settings:
    """Layer command-line options over the environment settings."""
    canvas_update = {}
    if width is not None:
        canvas_update["width"] = width
    if height is not None:
        canvas_update["height"] = height
    if canvas is not None:
        canvas_update["backend"] = canvas
    if output is not None:
        canvas_update["output_path"] = output
        if canvas is None:
            canvas_update["backend"] = CanvasBackend.PNG
    if no_wait:
        canvas_update["hold_open"] = False

    workers_update = {}
    if launcher is not None:
        workers_update["launcher"] = launcher
    if byte_exact:
        workers_update["align_chunks"] = False

    transport_update = {}
    if batch_size is not None:
        transport_update["batch_size"] = batch_size

    return settings.model_copy(
        update={
            "canvas": settings.canvas.model_copy(update=canvas_update),
            "workers": settings.workers.model_copy(update=workers_update),
            "transport": settings.transport.model_copy(update=transport_update),
            "debug": settings.debug or verbose,
        }
    )


@app.command(context_settings={"ignore_unknown_options": True})
def blit(
    num_workers: Annotated[Optional[str], typer.Argument(help="Number of worker tasks", show_default=False)] = None,
    input_file: Annotated[Optional[Path], typer.Argument(help="Raw row-major RGB file", show_default=False)] = None,
    filters: Annotated[str, typer.Argument(help="Filters to apply in order: g=grayscale i=invert l=lighten d=darken")] = "",
    width: Annotated[Optional[int], typer.Option(help="Canvas width in pixels", min=1, max=MAX_DIMENSION)] = None,
    height: Annotated[Optional[int], typer.Option(help="Canvas height in pixels", min=1, max=MAX_DIMENSION)] = None,
    canvas: Annotated[Optional[CanvasBackend], typer.Option(help="Canvas backend")] = None,
    output: Annotated[Optional[Path], typer.Option(help="PNG output file (implies --canvas png)")] = None,
    launcher: Annotated[Optional[LauncherKind], typer.Option(help="Worker launcher")] = None,
    batch_size: Annotated[Optional[int], typer.Option(help="Point records per message", min=1)] = None,
    byte_exact: Annotated[bool, typer.Option("--byte-exact", help="Split chunks by byte count, not whole pixels")] = False,
    no_wait: Annotated[bool, typer.Option("--no-wait", help="Close the canvas as soon as the image is complete")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Render INPUT_FILE with NUM_WORKERS parallel workers."""
    if num_workers is None or input_file is None:
        console.print(USAGE + "\n", markup=False)
        raise typer.Exit(0)

    try:
        settings = _apply_overrides(
            get_settings(),
            width=width,
            height=height,
            canvas=canvas,
            output=output,
            launcher=launcher,
            batch_size=batch_size,
            byte_exact=byte_exact,
            no_wait=no_wait,
            verbose=verbose,
        )
    except ValidationError as e:
        err_console.print(f"[red]{PROGNAME}(r0): invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if settings.debug:
        for name in list(logging.root.manager.loggerDict):
            if name.startswith(PROGNAME):
                logging.getLogger(name).setLevel(logging.DEBUG)

    try:
        result = Coordinator(settings=settings).run(num_workers, input_file, filters)
    except BlitError as e:
        err_console.print(f"[red]{PROGNAME}(r0): {escape(str(e))}[/red]")
        raise typer.Exit(1)

    stats = result.stats
    table = Table(title="Blit Summary")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Workers", str(result.num_workers))
    table.add_row("Input", f"{result.length} bytes")
    table.add_row("Filters", ", ".join(result.filters.names) or "none")
    table.add_row("Points", f"{stats.points_received}/{stats.expected}")
    table.add_row("Batches", str(stats.batches_received))
    table.add_row("Duplicates", str(stats.duplicates))
    table.add_row("Time", f"{stats.elapsed:.2f} s")
    console.print(table)

    if settings.canvas.backend == CanvasBackend.PNG:
        console.print(f"[green]Image saved to {settings.canvas.output_path}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
