"""The orphans command."""

from __future__ import annotations

import click

from ..exceptions import BackupError
from ._helpers import main, _split_paths


@main.command("orphans")
@click.argument("args", nargs=-1, required=True, metavar="PATH... BACKUP_LOCATION")
@click.option("--delete", "delete", is_flag=True, default=False,
              help="Remove the orphaned backup files instead of only listing them.")
def orphans_cmd(args, delete):
    """List backed-up files whose source no longer exists.

    Renamed files keep their old backup copy; this finds such leftovers
    for every working tree under PATH.
    """
    from ..orphans import scan_orphans

    paths, backup_location = _split_paths(args)
    try:
        found = scan_orphans(paths, backup_location, delete=delete)
    except (BackupError, OSError) as exc:
        raise click.ClickException(str(exc))

    if not found:
        click.echo("No orphaned backups.")
        return
    count = 0
    for tree, rels in found.items():
        click.echo(f"{tree}:")
        for rel in rels:
            click.echo(f"  {rel}")
        count += len(rels)
    verb = "Removed" if delete else "Found"
    click.echo(f"{verb} {count} orphaned file(s).")
