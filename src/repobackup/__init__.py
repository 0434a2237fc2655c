from ._ignore import find_repo_root, is_ignored
from ._types import ApplyReport, ChangeSet, CopyOp, PassReport, PathError
from .backup import backup_base, backup_path_for, run_pass
from .changeset import apply_changeset, backup_working_tree, resolve_changeset
from .exceptions import BackupError, DiscoveryError, InspectorError
from .fs import LocalFS
from .inspector import DiffEntry, DiffStatus, GitInspector, RepoInspector
from .mirror import mirror_dir
from .orphans import find_orphaned_backups, scan_orphans
from .walk import find_temp_dirs, find_working_trees

__version__ = "1.0.0"

__all__ = [
    "run_pass", "backup_base", "backup_path_for",
    "resolve_changeset", "apply_changeset", "backup_working_tree",
    "mirror_dir", "is_ignored", "find_repo_root",
    "find_working_trees", "find_temp_dirs",
    "find_orphaned_backups", "scan_orphans",
    "ApplyReport", "ChangeSet", "CopyOp", "PassReport", "PathError",
    "BackupError", "DiscoveryError", "InspectorError",
    "LocalFS", "DiffEntry", "DiffStatus", "GitInspector", "RepoInspector",
]
