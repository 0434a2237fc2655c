"""Watch mode for the backup command."""

from __future__ import annotations

import datetime
import os

import click

from ._helpers import _print_report


def _import_watchfiles():
    """Lazy-import watchfiles, raising a friendly error if missing."""
    try:
        import watchfiles
        return watchfiles
    except ImportError:
        raise click.ClickException(
            "watchfiles is required for --watch mode.\n"
            "Install it with: pip install repobackup[watch]"
        )


def _run_backup_cycle(paths, backup_location):
    """Run one full backup pass and print its summary."""
    from ..backup import run_pass

    report = run_pass(paths, backup_location)
    now = datetime.datetime.now().strftime("%H:%M:%S")
    _print_report(report, prefix=f"[{now}] Backup")
    return report


def watch_and_backup(paths, backup_location, *, debounce):
    """Back up *paths*, then again on every change batch under them.

    Each pass is independent.  Changes inside the backup location are
    not watched, so a backup stored under a source path cannot retrigger
    itself.
    """
    watchfiles = _import_watchfiles()

    # Initial pass to catch up with anything changed while not watching
    click.echo(f"Watching {', '.join(paths)} -> {backup_location} (debounce {debounce}ms)")
    try:
        _run_backup_cycle(paths, backup_location)
    except Exception as exc:
        click.echo(f"ERROR: Initial backup failed: {exc}", err=True)

    watch_filter = watchfiles.DefaultFilter(
        ignore_paths=[os.path.abspath(backup_location)],
    )
    try:
        for _changes in watchfiles.watch(*paths, watch_filter=watch_filter,
                                         debounce=debounce):
            click.echo("Change detected. Running backup...")
            try:
                _run_backup_cycle(paths, backup_location)
            except Exception as exc:
                click.echo(f"ERROR: Backup failed after change: {exc}", err=True)
    except KeyboardInterrupt:
        click.echo("\nStopped watching.")
