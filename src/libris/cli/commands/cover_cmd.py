# ABOUTME: The `libris cover` command for extracting a book's cover image to a file.
# ABOUTME: Books without a decodable cover are reported, not treated as errors.

from pathlib import Path

import click
from rich.console import Console

from libris.cli.options import db_option, open_collection, require_book

console = Console()

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
}


@click.command("cover")
@click.argument("book_id", type=int)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the image (default: cover-<id> with a matching extension).",
)
@db_option
def cover(book_id: int, output: Path | None, db_path: Path | None) -> None:
    """Write the cover image of a book to a file."""
    with open_collection(db_path) as collection:
        book = require_book(collection, book_id, console)
        image = book.cover()

    if image is None:
        console.print(f"[yellow]{book.title} has no cover.[/yellow]")
        return

    target = output or Path(f"cover-{book_id}{_EXTENSIONS.get(image.media_type, '.img')}")
    target.write_bytes(image.data)
    console.print(f"Wrote {len(image)} bytes to [bold]{target}[/bold].")
