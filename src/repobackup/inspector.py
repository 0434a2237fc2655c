"""Repository inspection: everything the engine needs to ask git.

:class:`RepoInspector` is the interface the resolver and the ignore
classifier depend on.  :class:`GitInspector` answers it by running the
``git`` executable against an explicit working-tree path (``git -C``);
the process working directory is never consulted.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence

from .exceptions import InspectorError

logger = logging.getLogger(__name__)


class DiffStatus(str, Enum):
    """Status letter of a ``git diff --name-status`` entry."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def from_code(cls, code: str) -> DiffStatus:
        """Map a raw status field (``M``, ``R087``, ...) to a member."""
        try:
            return cls(code[:1])
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class DiffEntry:
    """One changed path between the working tree and its upstream.

    Attributes:
        status: :class:`DiffStatus` of the change.
        path: Path relative to the tree root (forward slashes).  For
            renames and copies this is the *old* path.
        new_path: New path for renames and copies, else ``None``.
    """
    status: DiffStatus
    path: str
    new_path: str | None = None


class RepoInspector(Protocol):
    """Questions the engine asks about one working tree."""

    def list_remotes(self, tree: str) -> list[str]: ...

    def has_upstream(self, tree: str) -> bool: ...

    def diff_against_upstream(self, tree: str) -> list[DiffEntry]: ...

    def list_tracked(self, tree: str) -> list[str]: ...

    def list_untracked(self, tree: str) -> list[str]: ...

    def check_ignore(self, repo_root: str, rel_path: str) -> bool: ...


# ---------------------------------------------------------------------------
# Output parsing
# ---------------------------------------------------------------------------

def _split_z(out: str) -> list[str]:
    """Split NUL-delimited git output, dropping empty fields."""
    return [f for f in out.split("\0") if f]


def parse_name_status_z(out: str) -> list[DiffEntry]:
    """Parse ``git diff --name-status -z`` output.

    Each record is ``STATUS\\0PATH\\0``, or ``STATUS\\0OLD\\0NEW\\0`` for
    renames and copies.  Raises :class:`ValueError` on a record with a
    missing or empty path.
    """
    fields = out.split("\0")
    if fields and fields[-1] == "":
        # terminating NUL
        fields.pop()
    entries: list[DiffEntry] = []
    i = 0
    while i < len(fields):
        code = fields[i]
        if not code:
            i += 1
            continue
        status = DiffStatus.from_code(code)
        width = 2 if status in (DiffStatus.RENAMED, DiffStatus.COPIED) else 1
        paths = fields[i + 1:i + 1 + width]
        if len(paths) < width or not all(paths):
            raise ValueError(f"Truncated {code} record in diff output")
        entries.append(DiffEntry(status, *paths))
        i += 1 + width
    return entries


# ---------------------------------------------------------------------------
# git-backed implementation
# ---------------------------------------------------------------------------

class GitInspector:
    """:class:`RepoInspector` that shells out to the ``git`` executable."""

    upstream = "@{u}"

    def __init__(self, git: str = "git") -> None:
        self.git = git

    def _run(self, path: str, args: Sequence[str], *,
             ok: Sequence[int] | None = (0,)) -> subprocess.CompletedProcess:
        """Run ``git -C path args``.

        Raises :class:`InspectorError` when git cannot be started or the
        exit code is not in *ok* (``ok=None`` accepts every exit code).
        """
        cmd = [self.git, "-C", path, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True)
        except OSError as exc:
            raise InspectorError(cmd, None, str(exc)) from exc
        if ok is not None and proc.returncode not in ok:
            raise InspectorError(
                cmd, proc.returncode, os.fsdecode(proc.stderr),
            )
        return proc

    def _stdout(self, path: str, args: Sequence[str]) -> str:
        return os.fsdecode(self._run(path, args).stdout)

    # ------------------------------------------------------------------
    def list_remotes(self, tree: str) -> list[str]:
        out = self._stdout(tree, ["remote"])
        return [line.strip() for line in out.splitlines() if line.strip()]

    def has_upstream(self, tree: str) -> bool:
        """True if the current branch has a resolvable upstream.

        Every non-zero exit (no upstream configured, detached HEAD,
        remote branch gone) means "no upstream".
        """
        proc = self._run(tree, ["rev-parse", "--verify", "--quiet", self.upstream],
                         ok=None)
        return proc.returncode == 0

    def diff_against_upstream(self, tree: str) -> list[DiffEntry]:
        out = self._stdout(tree, ["diff", "--name-status", "-z", self.upstream])
        return parse_name_status_z(out)

    def list_tracked(self, tree: str) -> list[str]:
        return _split_z(self._stdout(tree, ["ls-files", "-z"]))

    def list_untracked(self, tree: str) -> list[str]:
        """Untracked, non-ignored files.

        Nested repositories show up as ``dir/`` entries; they are left
        out because they are backed up as working trees of their own.
        """
        out = self._stdout(tree, ["ls-files", "--others", "--exclude-standard", "-z"])
        return [f for f in _split_z(out) if not f.endswith("/")]

    def check_ignore(self, repo_root: str, rel_path: str) -> bool:
        proc = self._run(repo_root, ["check-ignore", "-q", "--", rel_path],
                         ok=(0, 1))
        return proc.returncode == 0
