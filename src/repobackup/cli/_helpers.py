"""Shared helpers, logging setup, and the main CLI group."""

from __future__ import annotations

import logging

import click

from .. import __version__
from .._types import PassReport, format_summary

USAGE = "backup-repos backup <path1> [<path2> ...] <backup-location>"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

class _ClickHandler(logging.Handler):
    """Route ``repobackup`` log records to stderr through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def _setup_logging(verbose: bool) -> None:
    """Attach a single :class:`_ClickHandler` to the package logger."""
    logger = logging.getLogger("repobackup")
    for handler in list(logger.handlers):
        if isinstance(handler, _ClickHandler):
            logger.removeHandler(handler)
    handler = _ClickHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _split_paths(args: tuple[str, ...]) -> tuple[list[str], str]:
    """Split ``PATH... BACKUP_LOCATION`` into source paths and the destination."""
    if len(args) < 2:
        raise click.UsageError(f"Too few arguments.\nUsage: {USAGE}")
    return list(args[:-1]), args[-1]


def _print_report(report: PassReport, prefix: str = "Backup") -> None:
    """Print the one-line summary of a pass, and the error count if any."""
    click.echo(f"{prefix}: {format_summary(report.changes)}")
    if report.errors:
        click.echo(f"{len(report.errors)} source root(s) failed:", err=True)
        for e in report.errors:
            click.echo(f"ERROR: {e.path}: {e.error}", err=True)


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(__version__, prog_name="backup-repos")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """backup-repos: scan git repos for unpushed changes and back them up.

    \b
    Quick start:
      backup-repos backup ~/src /mnt/backup
      backup-repos backup ~/src ~/work /mnt/backup --watch
      backup-repos orphans ~/src /mnt/backup

    \b
    Repos with an upstream only have their differences from it copied;
    repos without one are copied in full (tracked and untracked files,
    minus ignored ones).  Directories named "temp" are mirrored too.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)
