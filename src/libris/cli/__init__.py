# ABOUTME: CLI package for Libris, built on Click.
# ABOUTME: Defines the root command group, logging setup and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from libris.cli.commands import (
    add_cmd,
    cover_cmd,
    info_cmd,
    label_cmd,
    ls_cmd,
    reload_cmd,
    series_cmd,
    tag_cmd,
)


def _configure_logging(verbose: bool) -> None:
    """Route libris log records through Rich at WARNING, or DEBUG with --verbose."""
    logger = logging.getLogger("libris")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(show_path=False))


@click.group()
@click.version_option(package_name="libris")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Libris - book metadata kept in sync between files and a library database."""
    _configure_logging(verbose)


cli.add_command(add_cmd.add)
cli.add_command(cover_cmd.cover)
cli.add_command(info_cmd.info)
cli.add_command(label_cmd.label)
cli.add_command(ls_cmd.ls)
cli.add_command(reload_cmd.reload)
cli.add_command(series_cmd.series)
cli.add_command(tag_cmd.tag)
