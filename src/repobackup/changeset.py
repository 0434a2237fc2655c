"""Work out and apply the file operations for one working tree.

A tree with a remote and a resolvable upstream only needs what differs
from that upstream; everything else already lives on the remote.  A
tree without one is backed up in full: every tracked file plus every
untracked file that is not ignored.
"""

from __future__ import annotations

import logging
import os

from ._types import ApplyReport, ChangeSet, CopyOp, PathError
from .fs import LocalFS
from .inspector import DiffStatus, RepoInspector

logger = logging.getLogger(__name__)


def _join(base: str, rel: str) -> str:
    """Join a forward-slash relative path from git onto *base*."""
    return os.path.join(base, *rel.split("/"))


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_changeset(tree_path: str, backup_path: str, inspector: RepoInspector, *,
                      fs: LocalFS | None = None) -> ChangeSet:
    """Compute the :class:`ChangeSet` for *tree_path* against *backup_path*."""
    fs = fs or LocalFS()
    changes = ChangeSet()
    has_remote = bool(inspector.list_remotes(tree_path))
    if has_remote and inspector.has_upstream(tree_path):
        _resolve_against_upstream(tree_path, backup_path, inspector, fs, changes)
    else:
        logger.info("  No upstream remote; backing up all tracked/untracked files.")
        _resolve_all_local(tree_path, backup_path, inspector, fs, changes)
    return changes


def _resolve_against_upstream(tree_path, backup_path, inspector, fs, changes):
    for entry in inspector.diff_against_upstream(tree_path):
        if entry.status == DiffStatus.DELETED:
            changes.delete(_join(backup_path, entry.path))
        elif entry.status in (DiffStatus.ADDED, DiffStatus.MODIFIED,
                              DiffStatus.TYPE_CHANGED):
            src = _join(tree_path, entry.path)
            if fs.exists(src):
                changes.copy(src, _join(backup_path, entry.path))
        elif entry.status == DiffStatus.RENAMED:
            # Old source onto the new backup path; the old backup path
            # is kept.
            changes.copy(_join(tree_path, entry.path),
                         _join(backup_path, entry.new_path))
        else:
            logger.debug("  Ignoring %s entry for %s", entry.status.name, entry.path)


def _resolve_all_local(tree_path, backup_path, inspector, fs, changes):
    for rel in inspector.list_tracked(tree_path):
        src = _join(tree_path, rel)
        dst = _join(backup_path, rel)
        if fs.exists(src):
            changes.copy(src, dst)
        else:
            changes.delete(dst)
    for rel in inspector.list_untracked(tree_path):
        changes.copy(_join(tree_path, rel), _join(backup_path, rel))


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def _label(path: str, base: str | None) -> str:
    if base is None:
        return path
    return os.path.relpath(path, base).replace(os.sep, "/")


def _is_current(op: CopyOp, fs: LocalFS, report: ApplyReport) -> bool:
    """True if the backup exists and is at least as new as the source.

    A directory at the backup path is never current, and neither is the
    backup of a source that no longer exists (the copy reports it).  A
    stat failure on either side counts as "not current": a backup is
    never dropped for lack of metadata.
    """
    if not fs.lexists(op.dst) or fs.is_dir(op.dst) or not fs.lexists(op.src):
        return False
    try:
        src_mtime = fs.stat(op.src).st_mtime_ns
        dst_mtime = fs.stat(op.dst).st_mtime_ns
    except OSError as exc:
        logger.warning("  Warning: Could not stat %s or %s: %s", op.src, op.dst, exc)
        report.warnings.append(PathError(path=op.src, error=f"stat failed: {exc}"))
        return False
    return src_mtime <= dst_mtime


def apply_changeset(changes: ChangeSet, *, fs: LocalFS | None = None,
                    base: str | None = None) -> ApplyReport:
    """Apply *changes*: deletions first, then copies newer than their backup.

    *base* is only used to shorten paths in log messages.  A source that
    disappeared before it could be copied is a warning.  Any other
    ``OSError`` propagates and abandons the remaining operations.
    """
    fs = fs or LocalFS()
    report = ApplyReport()

    for dst in changes.deletes:
        if fs.lexists(dst):
            logger.info("  Deleting: %s", _label(dst, base))
            fs.remove(dst)
            report.deleted.append(dst)

    for op in changes.copies:
        if _is_current(op, fs, report):
            logger.debug("  Skipping: %s (no newer changes)", _label(op.dst, base))
            report.skipped.append(op.dst)
            continue
        logger.info("  Copying: %s", _label(op.dst, base))
        try:
            fs.copy_file(op.src, op.dst)
        except FileNotFoundError as exc:
            if fs.lexists(op.src):
                raise
            logger.warning("  Warning: %s vanished before it could be copied", op.src)
            report.warnings.append(PathError(path=op.src, error=str(exc)))
            continue
        report.copied.append(op.dst)

    return report


def backup_working_tree(tree_path: str, backup_path: str, inspector: RepoInspector, *,
                        fs: LocalFS | None = None) -> ApplyReport:
    """Resolve and apply the change set for one working tree."""
    fs = fs or LocalFS()
    logger.info("Processing repo: %s", tree_path)
    logger.info("  Backup location: %s", backup_path)
    fs.make_dirs(backup_path)
    changes = resolve_changeset(tree_path, backup_path, inspector, fs=fs)
    logger.info("  Files to copy: %d, Files to delete: %d",
                len(changes.copies), len(changes.deletes))
    return apply_changeset(changes, fs=fs, base=backup_path)
