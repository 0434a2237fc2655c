"""Discover working trees and ``temp`` directories under a source root."""

from __future__ import annotations

import logging
import os
from typing import Callable, Collection

from ._ignore import REPO_MARKER
from .exceptions import DiscoveryError

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "temp"


def _scan_dirs(root: str, match: Callable[[str, list[str], list[str]], bool],
               exclude: Collection[str] = ()) -> list[str]:
    """Return every directory under *root* (inclusive) for which *match* holds.

    *match* receives ``(dirpath, dirnames, filenames)``.  Symlinked
    directories are never followed, and neither ``.git`` directories nor
    the directories in *exclude* are entered.  Unreadable subdirectories
    are logged and skipped.
    """
    if not os.path.isdir(root):
        raise DiscoveryError(f"Not a directory: {root}")
    skip = {os.path.normcase(os.path.abspath(d)) for d in exclude}

    def _on_error(exc: OSError) -> None:
        if os.path.normpath(exc.filename or "") == os.path.normpath(root):
            raise DiscoveryError(f"Cannot scan {root}: {exc}") from exc
        logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc)

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error,
                                                followlinks=False):
        if match(dirpath, dirnames, filenames):
            found.append(dirpath)
        dirnames[:] = [
            d for d in dirnames
            if d != REPO_MARKER
            and os.path.normcase(os.path.abspath(os.path.join(dirpath, d))) not in skip
        ]
    return found


def find_working_trees(root: str, *, exclude: Collection[str] = ()) -> list[str]:
    """Directories under *root* that contain a ``.git`` marker.

    Gitfiles (worktrees, submodules) count as markers as well as
    ``.git`` directories.  Directories in *exclude* (typically the backup
    location) are not searched.
    """
    return _scan_dirs(
        root, lambda _d, dirnames, filenames: REPO_MARKER in dirnames or REPO_MARKER in filenames,
        exclude,
    )


def find_temp_dirs(root: str, *, exclude: Collection[str] = ()) -> list[str]:
    """Directories below *root* named exactly ``temp``, outside *exclude*."""
    return _scan_dirs(
        root,
        lambda dirpath, _dn, _fn: dirpath != root and os.path.basename(dirpath) == TEMP_DIR_NAME,
        exclude,
    )
