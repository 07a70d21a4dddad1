# src/blockfolio/cli.py
"""
Blockfolio Command Line Interface (CLI).

Terminal front end over the document store and the export pipeline, built
with `typer` and `rich`.

Features
--------
- **Export**: render a stored (or given) document to a date-stamped PDF.
- **Show**: print the rendered output tree as an outline, without a PDF.
- **Import / Clear / Status**: manage the persisted document.

Usage
-----
    # Export the stored document
    $ blockfolio export --title "My Portfolio" -o exports/

    # Export a document file directly
    $ blockfolio export samples/portfolio.json

    # Inspect what is stored
    $ blockfolio status
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.tree import Tree

from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.contracts.output import OutputNode
from blockfolio.core.settings import load_settings
from blockfolio.core.storage.disk import FileStore
from blockfolio.layout.reportlab_renderer import ReportLabRenderer
from blockfolio.pipelines.export import render
from blockfolio.pipelines.export_flow import ExportErrorKind, Exporter

load_dotenv()

app = typer.Typer(
    help="Blockfolio: persist block documents and export them to PDF.",
    rich_markup_mode="markdown",
)
console = Console()

SourceArg = Annotated[
    Path | None,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="JSON document file. Defaults to the stored document.",
    ),
]
StorageDirOpt = Annotated[
    Path | None,
    typer.Option("--storage-dir", "-s", help="Override BLOCKFOLIO_STORAGE_DIR."),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _store(storage_dir: Path | None) -> FileStore:
    return FileStore(storage_dir or load_settings().storage_dir)


def _read_json(path: Path) -> Any:
    """Helper: Load a JSON document file or exit with a readable error."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]❌ Could not read {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _load_document(source: Path | None, storage_dir: Path | None) -> Any:
    """Helper: Return the raw document from ``source`` or from the store."""
    if source is not None:
        return _read_json(source)
    return _store(storage_dir).load(load_settings().storage_key) or []


def _outline(node: OutputNode, tree: Tree) -> None:
    label = f"[cyan]{node.role.value}[/cyan]"
    if node.marker:
        label += f" {node.marker}"
    if node.src:
        label += f" [dim]{node.src}[/dim]"
    if node.text:
        label += f" {node.text[:60]!r}"
    branch = tree.add(label)
    for child in node.children:
        _outline(child, branch)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def export(
    source: SourceArg = None,
    title: Annotated[
        str | None,
        typer.Option("--title", "-t", help="Document title (BLOCKFOLIO_DOCUMENT_TITLE)."),
    ] = None,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", file_okay=False, help="Where to write the PDF."),
    ] = Path("."),
    storage_dir: StorageDirOpt = None,
) -> None:
    """
    Export a document to PDF.

    An empty document is not an error: a notice is printed and nothing is
    written.
    """
    cfg = load_settings()
    document = _load_document(source, storage_dir)
    exporter = Exporter(
        ReportLabRenderer(),
        basename=cfg.export_basename,
        info=cfg.document_info(),
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[cyan]Rendering PDF...", total=None)
        result = asyncio.run(exporter.export(document, title))

    if result.is_err():
        error = result.unwrap_err()
        if error.kind is ExportErrorKind.NOTHING_TO_EXPORT:
            console.print(f"[yellow]{error.message}[/yellow]")
            return
        console.print(f"[bold red]❌ {error.message}[/bold red]")
        raise typer.Exit(code=1)

    artifact = result.unwrap()
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / artifact.filename
    target.write_bytes(artifact.data)
    console.print(
        Panel(
            f"Saved to: [link=file://{target.resolve()}]{target}[/link] ({artifact.size} bytes)",
            title="Export",
            border_style="green",
        )
    )


@app.command()  # type: ignore[misc]
def show(
    source: SourceArg = None,
    title: Annotated[str | None, typer.Option("--title", "-t")] = None,
    storage_dir: StorageDirOpt = None,
) -> None:
    """Print the rendered output tree without producing a PDF."""
    blocks = sanitize(_load_document(source, storage_dir))
    doc = render(blocks, title or load_settings().document_title)
    tree = Tree(f"[bold]{doc.title_node.text}[/bold]")
    for node in doc.output_nodes:
        _outline(node, tree)
    console.print(tree)
    console.print(f"[dim]{doc.footer_node.text}[/dim]")


@app.command("import")  # type: ignore[misc]
def import_document(
    file: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True),
    ],
    storage_dir: StorageDirOpt = None,
) -> None:
    """Sanitize a JSON document file and store it as the current document."""
    blocks = sanitize(_read_json(file))
    if not blocks:
        console.print("[yellow]No valid blocks found; nothing stored.[/yellow]")
        raise typer.Exit(code=1)
    if not _store(storage_dir).save(load_settings().storage_key, blocks):
        console.print("[bold red]❌ Failed to save document.[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Stored {len(blocks)} blocks.[/green]")


@app.command()  # type: ignore[misc]
def status(storage_dir: StorageDirOpt = None) -> None:
    """Describe what is stored under the configured key."""
    key = load_settings().storage_key
    store = _store(storage_dir)
    info = store.inspect(key)
    console.print(f"Key: [cyan]{key}[/cyan]")
    console.print(f"Location: [dim]{store.path_for(key)}[/dim]")
    console.print(info.describe())


@app.command()  # type: ignore[misc]
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    storage_dir: StorageDirOpt = None,
) -> None:
    """Remove the stored document."""
    key = load_settings().storage_key
    if not yes and not Confirm.ask(f"Clear the document stored under {key!r}?", default=False):
        console.print("[dim]Aborted.[/dim]")
        return
    if not _store(storage_dir).clear(key):
        console.print("[bold red]❌ Failed to clear document.[/bold red]")
        raise typer.Exit(code=1)
    console.print("[green]Cleared.[/green]")


if __name__ == "__main__":
    app()
