"""Local filesystem primitives used by the copier and the resolver.

Everything that touches the disk goes through :class:`LocalFS` so the
engine can be driven against a fake in tests.  Paths are plain strings.
"""

from __future__ import annotations

import os
import shutil


class LocalFS:
    """The ``{exists, stat, copy, remove, mkdirs, listdir}`` capability set."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def exists(self, path: str) -> bool:
        """True if *path* exists (broken symlinks count as missing)."""
        return os.path.exists(path)

    def lexists(self, path: str) -> bool:
        """True if *path* exists, including dangling symlinks."""
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        """True for a real directory; a symlink to a directory is not one."""
        return os.path.isdir(path) and not os.path.islink(path)

    def is_symlink(self, path: str) -> bool:
        return os.path.islink(path)

    def stat(self, path: str) -> os.stat_result:
        """lstat *path*: symlinks are compared as links, like they are copied."""
        return os.lstat(path)

    def list_dir(self, path: str) -> list[str]:
        """Names of the direct entries of *path*, sorted."""
        return sorted(os.listdir(path))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def make_dirs(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def copy_file(self, src: str, dst: str) -> None:
        """Copy one file, preserving its mtime.

        Parent directories are created; a non-directory standing where a
        parent directory belongs is removed first.  A directory at *dst*
        is replaced, and so is a symlink (never written through).  A
        symlink at *src* is copied as a link.
        """
        # fail before touching dst when the source is gone
        os.lstat(src)
        parent = os.path.dirname(dst)
        if parent:
            self._make_parent_dirs(parent)
        if os.path.isdir(dst) and not os.path.islink(dst):
            shutil.rmtree(dst)
        elif os.path.islink(dst) or (os.path.islink(src) and os.path.lexists(dst)):
            os.unlink(dst)
        shutil.copy2(src, dst, follow_symlinks=False)

    @staticmethod
    def _make_parent_dirs(parent: str) -> None:
        # The lowest existing component that is not a directory blocks
        # makedirs; everything above it is a directory already.
        current = parent
        while not os.path.isdir(current):
            if os.path.lexists(current):
                os.unlink(current)
                break
            up = os.path.dirname(current)
            if up == current:
                break
            current = up
        os.makedirs(parent, exist_ok=True)

    def copy_tree(self, src: str, dst: str) -> None:
        """Bulk-copy the contents of *src* over *dst*, preserving mtimes."""
        shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)

    def remove(self, path: str) -> None:
        """Remove a file, symlink, or whole subtree.  Absent is success."""
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
            return
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
