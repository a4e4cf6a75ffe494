# ABOUTME: The `libris add` command for reading book files into the library database.
# ABOUTME: Accepts files or directories; directories are searched for supported formats.

from pathlib import Path

import click
from rich.console import Console

from libris.cli.options import books_dir_option, db_option, open_collection

console = Console()

SUPPORTED_EXTENSIONS = (".epub", ".txt")


def _find_books(paths: tuple[Path, ...]) -> list[Path]:
    """Expand directories into the supported book files below them."""
    found: list[Path] = []
    for path in paths:
        if path.is_dir():
            found.extend(
                sorted(p for p in path.rglob("*") if p.suffix.lower() in SUPPORTED_EXTENSIONS)
            )
        else:
            found.append(path)
    return found


@click.command("add")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@db_option
@books_dir_option
def add(paths: tuple[Path, ...], db_path: Path | None, books_dir: Path | None) -> None:
    """Read book files and add them to the library."""
    files = _find_books(paths)
    if not files:
        console.print("[yellow]No book files found.[/yellow]")
        return

    with open_collection(db_path, books_dir) as collection:
        result = collection.add_files(files)

    for book in result.added:
        console.print(f"  [green]+[/green] [{book.id}] {book.title}")

    parts = [f"[green]{len(result.added)} added[/green]"]
    if result.skipped:
        parts.append(f"[yellow]{result.skipped} skipped[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")
    console.print(", ".join(parts))

    if result.error_details:
        console.print(f"\n[yellow]{result.errors} file(s) could not be read:[/yellow]")
        for path, msg in result.error_details:
            console.print(f"  [dim]{path.name}:[/dim] {msg}")
