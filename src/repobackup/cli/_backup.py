"""The backup command."""

from __future__ import annotations

import click

from ._helpers import main, _print_report, _split_paths


@main.command("backup")
@click.argument("args", nargs=-1, required=True, metavar="PATH... BACKUP_LOCATION")
@click.option("-w", "--watch", "watch", is_flag=True, default=False,
              help="Watch for changes to source files and back them up automatically.")
@click.option("--debounce", type=int, default=2000,
              help="Debounce delay in ms for --watch (default: 2000).")
@click.pass_context
def backup_cmd(ctx, args, watch, debounce):
    """Back up git repos under one or more paths to a backup location.

    The last argument is the backup location; every other argument is a
    directory searched for git working trees and "temp" directories.

    \b
        backup-repos backup ~/src /mnt/backup
        backup-repos backup ~/src ~/notes /mnt/backup --watch
    """
    from ..backup import run_pass

    paths, backup_location = _split_paths(args)
    if watch:
        from ._watch import watch_and_backup
        watch_and_backup(paths, backup_location, debounce=debounce)
        return

    report = run_pass(paths, backup_location)
    _print_report(report)
    if report.errors:
        ctx.exit(1)
