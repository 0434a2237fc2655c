"""Find backup files whose source file no longer exists.

The resolver never deletes the old backup path of a renamed file, and
a tree whose upstream moved on can leave older copies behind.  This
module reports (and optionally removes) such files; it is not part of a
normal backup pass.
"""

from __future__ import annotations

import logging
import os
from typing import Collection, Sequence

from .backup import _resolve_defaults, backup_base, backup_path_for
from .fs import LocalFS
from .inspector import RepoInspector
from .walk import find_temp_dirs, find_working_trees

logger = logging.getLogger(__name__)


def find_orphaned_backups(backup_dir: str, expected: Collection[str], *,
                          fs: LocalFS | None = None,
                          skip_dirs: Collection[str] = (),
                          prune_empty_dirs: bool = True) -> list[str]:
    """Return files under *backup_dir* whose relative path is not in *expected*.

    Paths are relative to *backup_dir* with forward slashes, sorted.
    Directories in *skip_dirs* (absolute paths, e.g. the backups of
    nested working trees) are not entered.  With *prune_empty_dirs*,
    directories left empty after the walk are removed.
    """
    fs = fs or LocalFS()
    skip = {os.path.normpath(d) for d in skip_dirs}
    orphans: list[str] = []
    _walk(backup_dir, "", set(expected), fs, skip, prune_empty_dirs, orphans)
    return sorted(orphans)


def _walk(directory, base_rel, expected, fs, skip, prune, orphans):
    for name in fs.list_dir(directory):
        rel = f"{base_rel}/{name}" if base_rel else name
        full = os.path.join(directory, name)
        if fs.is_dir(full):
            if os.path.normpath(full) in skip:
                continue
            _walk(full, rel, expected, fs, skip, prune, orphans)
            if prune and not fs.list_dir(full):
                fs.remove(full)
                logger.info(" Removed empty directory: %s/", rel)
        elif rel not in expected:
            orphans.append(rel)


def _expected_files(tree: str, inspector: RepoInspector, fs: LocalFS) -> set[str]:
    expected = {
        rel for rel in inspector.list_tracked(tree)
        if fs.exists(os.path.join(tree, *rel.split("/")))
    }
    expected.update(inspector.list_untracked(tree))
    return expected


def _prune_empty_parents(directory: str, stop: str, fs: LocalFS) -> None:
    """Remove *directory* and its ancestors below *stop* while they are empty."""
    stop = os.path.normpath(stop)
    directory = os.path.normpath(directory)
    while directory != stop and directory.startswith(stop + os.sep):
        if fs.list_dir(directory):
            return
        fs.remove(directory)
        directory = os.path.dirname(directory)


def scan_orphans(source_roots: Sequence[str], backup_location: str, *,
                 home: str | None = None, platform: str | None = None,
                 inspector: RepoInspector | None = None,
                 fs: LocalFS | None = None,
                 delete: bool = False) -> dict[str, list[str]]:
    """Map each working tree under *source_roots* to its orphaned backup files.

    Trees without a backup directory, or without orphans, are left out.
    With *delete*, the orphans are removed as well as reported, together
    with directories left empty; without it nothing is modified.
    """
    home, platform, inspector, fs = _resolve_defaults(home, platform, inspector, fs)
    base = backup_base(backup_location, home=home, platform=platform)
    exclude = [os.path.abspath(backup_location)]

    trees: list[str] = []
    temps: list[str] = []
    for root in (os.path.abspath(r) for r in source_roots):
        trees.extend(find_working_trees(root, exclude=exclude))
        temps.extend(find_temp_dirs(root, exclude=exclude))
    tree_backups = {t: backup_path_for(t, base, home) for t in trees}
    own_dirs = set(tree_backups.values()) | {backup_path_for(t, base, home) for t in temps}

    result: dict[str, list[str]] = {}
    for tree, bdir in tree_backups.items():
        if not fs.is_dir(bdir):
            continue
        orphans = find_orphaned_backups(
            bdir, _expected_files(tree, inspector, fs), fs=fs,
            skip_dirs=own_dirs - {bdir},
            prune_empty_dirs=delete,
        )
        if not orphans:
            continue
        result[tree] = orphans
        if delete:
            for rel in orphans:
                path = os.path.join(bdir, *rel.split("/"))
                fs.remove(path)
                logger.info("Removed orphan: %s", path)
                _prune_empty_parents(os.path.dirname(path), bdir, fs)
    return result
