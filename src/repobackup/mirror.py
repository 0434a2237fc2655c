"""Mirror an arbitrary directory into a backup directory.

Used for ``temp`` directories, which are not under version control and
so have no change set.  Works like ``rsync -a --delete``: copy
everything over, then prune what the source no longer has.
"""

from __future__ import annotations

import logging
import os

from .fs import LocalFS

logger = logging.getLogger(__name__)


def mirror_dir(src_dir: str, dst_dir: str, *, fs: LocalFS | None = None) -> None:
    """Make *dst_dir* a structural and content mirror of *src_dir*.

    1. Create *dst_dir* (and parents).
    2. Remove destination entries whose kind differs from the source
       entry of the same name (file vs. directory, or a symlink on
       either side), so the bulk copy never merges through them.
    3. Bulk-copy *src_dir* over *dst_dir*, preserving mtimes.
    4. Delete destination entries missing from the source, recursively.

    Idempotent.  ``OSError`` propagates.
    """
    fs = fs or LocalFS()
    if fs.lexists(dst_dir) and not fs.is_dir(dst_dir):
        logger.debug("Replacing non-directory %s", dst_dir)
        fs.remove(dst_dir)
    fs.make_dirs(dst_dir)
    _clear_type_conflicts(src_dir, dst_dir, fs)
    fs.copy_tree(src_dir, dst_dir)
    _prune_orphans(src_dir, dst_dir, fs)


def _clear_type_conflicts(src_dir: str, dst_dir: str, fs: LocalFS) -> None:
    for name in fs.list_dir(src_dir):
        src = os.path.join(src_dir, name)
        dst = os.path.join(dst_dir, name)
        if not fs.lexists(dst):
            continue
        if fs.is_symlink(src) or fs.is_symlink(dst):
            fs.remove(dst)
        elif fs.is_dir(src) != fs.is_dir(dst):
            logger.debug("Type changed, replacing %s", dst)
            fs.remove(dst)
        elif fs.is_dir(src):
            _clear_type_conflicts(src, dst, fs)


def _prune_orphans(src_dir: str, dst_dir: str, fs: LocalFS) -> None:
    # The bulk copy already covered the whole subtree, so recursion only
    # has to prune.
    for name in fs.list_dir(dst_dir):
        src = os.path.join(src_dir, name)
        dst = os.path.join(dst_dir, name)
        if not fs.lexists(src):
            logger.debug("Removing orphan %s", dst)
            fs.remove(dst)
        elif fs.is_dir(dst):
            _prune_orphans(src, dst, fs)
