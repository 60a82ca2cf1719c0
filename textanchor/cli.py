"""Command-line interface for textanchor."""

import asyncio
import json
import logging
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from textanchor import __version__
from textanchor.config import validate_span
from textanchor.dom import Element, from_html, to_html
from textanchor.errors import TextAnchorError
from textanchor.highlighter import Highlighter
from textanchor.logging_config import setup_logging
from textanchor.resolution import resolve_annotation
from textanchor.selection import capture as capture_selectors
from textanchor.storage import load_annotations

app = typer.Typer(
    name="textanchor",
    help="Capture, resolve and highlight text selectors in HTML documents.",
)
console = Console()
err_console = Console(stderr=True)


def _load_document(path: Path) -> Element:
    return from_html(path.read_text(encoding="utf-8"))


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging for all commands."""
    if verbose:
        setup_logging(logging.DEBUG)


@app.command()
def capture(
    document: Path = typer.Argument(..., exists=True, help="HTML document"),
    start: int = typer.Argument(..., help="Start offset in the document text"),
    end: int = typer.Argument(..., help="End offset in the document text"),
    output_format: str = typer.Option("yaml", "--format", "-f", help="yaml or json"),
) -> None:
    """Print position and quote selectors for a span."""
    try:
        validate_span(start, end)
        root = _load_document(document)
        selectors = [s.to_dict() for s in capture_selectors(root, (start, end))]
    except (TextAnchorError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    data = {"target": {"source": document.name, "selector": selectors}}
    if output_format == "json":
        console.print_json(json.dumps(data))
    else:
        console.print(
            yaml.safe_dump(data, sort_keys=False, allow_unicode=True), end="", markup=False, highlight=False
        )


@app.command()
def resolve(
    document: Path = typer.Argument(..., exists=True, help="HTML document"),
    annotations_file: Path = typer.Argument(..., exists=True, help="Annotations YAML file"),
) -> None:
    """Resolve every annotation and print its span."""
    try:
        root = _load_document(document)
        annotations = load_annotations(annotations_file)
    except (TextAnchorError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    content = root.text_content()
    table = Table(title=f"{len(annotations)} annotation(s) in {document.name}")
    table.add_column("Annotation")
    table.add_column("Span")
    table.add_column("Text")

    failures = 0
    for number, annotation in enumerate(annotations, start=1):
        label = str(annotation.id) if annotation.id is not None else f"#{number}"
        try:
            anchor = asyncio.run(resolve_annotation(annotation, root))
        except TextAnchorError as e:
            failures += 1
            table.add_row(escape(label), "[red]-[/red]", f"[red]{escape(str(e))}[/red]")
            continue
        table.add_row(escape(label), f"{anchor.start}-{anchor.end}", escape(anchor.text(content)))

    console.print(table)
    if failures:
        raise typer.Exit(1)


@app.command()
def highlight(
    document: Path = typer.Argument(..., exists=True, help="HTML document"),
    annotations_file: Path = typer.Argument(..., exists=True, help="Annotations YAML file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write HTML here instead of stdout"),
    chunk_size: int = typer.Option(10, "--chunk-size", help="Annotations drawn per chunk"),
) -> None:
    """Draw highlight markers for all annotations and emit the HTML."""
    failed: list[str] = []

    def on_failure(annotation, error):
        failed.append(f"{annotation.id if annotation.id is not None else annotation.local_id}: {error}")

    try:
        root = _load_document(document)
        annotations = load_annotations(annotations_file)
        highlighter = Highlighter(
            root, {"chunk_size": chunk_size, "hooks": {"on_anchoring_failure": on_failure}}
        )
        markers = asyncio.run(highlighter.draw_all(annotations))
    except (TextAnchorError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    result = to_html(root)
    if output is not None:
        output.write_text(result, encoding="utf-8")
        err_console.print(f"[bold green]Saved to:[/bold green] {output}")
    else:
        print(result)

    err_console.print(f"[dim]{len(markers)} marker(s), {len(failed)} unanchored[/dim]", highlight=False)
    for line in failed:
        err_console.print(f"  [yellow]{escape(line)}[/yellow]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"textanchor {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
