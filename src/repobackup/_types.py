"""Data structures shared by the resolver, the orchestrator and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CopyOp:
    """A queued copy of one source file to its backup location."""
    src: str
    dst: str


@dataclass
class ChangeSet:
    """Operations needed to bring one working tree's backup up to date.

    Attributes:
        copies: Copy operations, applied in order.
        deletes: Backup paths to remove.  Order does not matter.
    """
    copies: list[CopyOp] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.copies) + len(self.deletes)

    def copy(self, src: str, dst: str) -> None:
        self.copies.append(CopyOp(src, dst))

    def delete(self, dst: str) -> None:
        self.deletes.append(dst)


@dataclass
class PathError:
    """A path that produced a warning or an error.

    Attributes:
        path: The path involved.
        error: Human-readable message.
    """
    path: str
    error: str


@dataclass
class ApplyReport:
    """What applying change sets (or mirroring) actually did.

    Attributes:
        copied: Backup paths written.
        skipped: Backup paths left alone because they were not older.
        deleted: Backup paths removed.
        warnings: Non-fatal problems (stat failures, vanished sources).
    """
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    warnings: list[PathError] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        """``True`` if nothing was copied or deleted."""
        return not self.copied and not self.deleted

    @property
    def total(self) -> int:
        return len(self.copied) + len(self.deleted)

    def merge(self, other: ApplyReport) -> None:
        self.copied.extend(other.copied)
        self.skipped.extend(other.skipped)
        self.deleted.extend(other.deleted)
        self.warnings.extend(other.warnings)


@dataclass
class PassReport:
    """Result of one backup pass over all source roots.

    Attributes:
        trees: Working trees whose change sets were applied.
        temps: Temp directories that were mirrored.
        ignored_temps: Temp directories skipped by ignore rules.
        changes: Merged per-tree :class:`ApplyReport`.
        errors: One entry per root (or tree) whose processing failed.
    """
    trees: list[str] = field(default_factory=list)
    temps: list[str] = field(default_factory=list)
    ignored_temps: list[str] = field(default_factory=list)
    changes: ApplyReport = field(default_factory=ApplyReport)
    errors: list[PathError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def format_summary(changes: ApplyReport) -> str:
    """One-line ``+N -N (N unchanged)`` summary of an :class:`ApplyReport`."""
    parts = []
    if changes.copied:
        parts.append(f"+{len(changes.copied)}")
    if changes.deleted:
        parts.append(f"-{len(changes.deleted)}")
    summary = " ".join(parts) if parts else "no changes"
    if changes.skipped:
        summary += f" ({len(changes.skipped)} unchanged)"
    return summary
