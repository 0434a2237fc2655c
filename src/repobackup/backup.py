"""One backup pass: every working tree, then every ``temp`` directory.

Backups are laid out as::

    <backup-location>/Repo Backup Tool Backups/<platform>/<safe-home>/<path-relative-to-home>

where ``<safe-home>`` is the home directory with colons removed (so
``C:\\Users\\me`` becomes ``C\\Users\\me``).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Sequence

from ._ignore import is_ignored
from ._types import PassReport, PathError
from .changeset import backup_working_tree
from .exceptions import BackupError
from .fs import LocalFS
from .inspector import GitInspector, RepoInspector
from .mirror import mirror_dir
from .walk import find_temp_dirs, find_working_trees

logger = logging.getLogger(__name__)

PRODUCT_DIR = "Repo Backup Tool Backups"


# ---------------------------------------------------------------------------
# Backup layout
# ---------------------------------------------------------------------------

def safe_home(home: str) -> str:
    """*home* with colons removed and leading separators stripped."""
    return home.replace(":", "").lstrip("/\\")


def backup_base(backup_location: str, *, home: str, platform: str) -> str:
    """Root under which every backed-up path is placed."""
    return os.path.join(backup_location, PRODUCT_DIR, platform, safe_home(home))


def backup_path_for(path: str, base: str, home: str) -> str:
    """Backup location of *path*: *base* joined with *path* relative to *home*."""
    return os.path.normpath(os.path.join(base, os.path.relpath(path, home)))


def _resolve_defaults(home: str | None, platform: str | None,
                      inspector: RepoInspector | None, fs: LocalFS | None):
    if home is None:
        home = os.path.expanduser("~")
    return (
        home,
        platform or sys.platform,
        inspector if inspector is not None else GitInspector(),
        fs if fs is not None else LocalFS(),
    )


# ---------------------------------------------------------------------------
# Pass
# ---------------------------------------------------------------------------

def _backup_trees_under(root, base, home, inspector, fs, report: PassReport,
                        exclude) -> None:
    trees = find_working_trees(root, exclude=exclude)
    logger.info("Found %d git repositories under %s", len(trees), root)
    for processed, tree in enumerate(trees, 1):
        changes = backup_working_tree(
            tree, backup_path_for(tree, base, home), inspector, fs=fs,
        )
        report.trees.append(tree)
        report.changes.merge(changes)
        logger.info("Processed %d/%d repositories.", processed, len(trees))


def _backup_temps_under(root, base, home, inspector, fs, report: PassReport,
                        exclude) -> None:
    for tdir in find_temp_dirs(root, exclude=exclude):
        if is_ignored(tdir, inspector, fs=fs):
            logger.debug("Skipping ignored temp dir: %s", tdir)
            report.ignored_temps.append(tdir)
            continue
        btemp = backup_path_for(tdir, base, home)
        logger.info("Backing up temp dir: %s -> %s", tdir, btemp)
        mirror_dir(tdir, btemp, fs=fs)
        report.temps.append(tdir)


def run_pass(source_roots: Sequence[str], backup_location: str, *,
             home: str | None = None, platform: str | None = None,
             inspector: RepoInspector | None = None,
             fs: LocalFS | None = None) -> PassReport:
    """Back up every working tree and ``temp`` directory under *source_roots*.

    Roots are processed in order.  A failure while handling one root's
    trees (discovery, or any single tree) abandons the rest of that
    root's trees and moves on to the next root; temp directories are
    handled the same way per root.  Failures are logged and recorded in
    :attr:`PassReport.errors`.  The backup location is never searched,
    even when it lies under a source root.

    *home* and *platform* default to the current user's home directory
    and ``sys.platform``; *inspector* to :class:`GitInspector`.
    """
    home, platform, inspector, fs = _resolve_defaults(home, platform, inspector, fs)
    base = backup_base(backup_location, home=home, platform=platform)
    roots = [os.path.abspath(r) for r in source_roots]
    exclude = [os.path.abspath(backup_location)]
    report = PassReport()

    logger.info("Starting backup process for paths: %s", ", ".join(roots))
    logger.info("Backup base: %s", base)

    for root in roots:
        logger.info("--- Processing repos under '%s' ---", root)
        try:
            _backup_trees_under(root, base, home, inspector, fs, report, exclude)
        except (BackupError, OSError) as exc:
            logger.error("Error finding/processing repos under %s: %s", root, exc)
            report.errors.append(PathError(path=root, error=str(exc)))

    logger.info("--- Backing up temp directories ---")
    for root in roots:
        try:
            _backup_temps_under(root, base, home, inspector, fs, report, exclude)
        except (BackupError, OSError) as exc:
            logger.error("Error backing up temp directories under %s: %s", root, exc)
            report.errors.append(PathError(path=root, error=str(exc)))
    logger.info("Temp directories backup completed.")

    return report
