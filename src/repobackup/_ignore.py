"""Decide whether a directory is excluded by its repository's ignore rules.

Used to keep ignored ``temp`` directories out of the backup.  The rules
that apply are those of the *nearest* enclosing working tree; a path
with no enclosing working tree is never ignored.
"""

from __future__ import annotations

import os

from .fs import LocalFS
from .inspector import RepoInspector

REPO_MARKER = ".git"


def find_repo_root(path: str, *, fs: LocalFS | None = None) -> str | None:
    """Return the nearest directory at or above *path* containing ``.git``.

    Returns ``None`` when the walk reaches the filesystem root without
    finding one.
    """
    fs = fs or LocalFS()
    current = os.path.abspath(path)
    while True:
        if fs.lexists(os.path.join(current, REPO_MARKER)):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def is_ignored(path: str, inspector: RepoInspector, *,
               fs: LocalFS | None = None) -> bool:
    """True if *path* is excluded by the enclosing repository's ignore rules.

    Outside any repository the answer is ``False``.  A repository root
    is never ignored by its own rules.  :class:`~repobackup.exceptions.InspectorError`
    from the inspector propagates.
    """
    root = find_repo_root(path, fs=fs)
    if root is None:
        return False
    rel = os.path.relpath(os.path.abspath(path), root)
    if rel == os.curdir:
        return False
    rel = rel.replace(os.sep, "/")
    return inspector.check_ignore(root, rel)
