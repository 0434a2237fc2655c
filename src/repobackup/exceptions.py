"""Exceptions for repobackup."""


class BackupError(Exception):
    """Base class for errors raised by the backup engine."""


class InspectorError(BackupError):
    """Raised when ``git`` fails in a way that is not a recognised answer.

    Exit code 1 from ``git check-ignore`` ("not ignored") and a failing
    ``@{u}`` lookup ("no upstream") are answers, not errors.  Anything
    else, including a missing ``git`` executable, ends up here.
    """

    def __init__(self, cmd, returncode: int | None = None, stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"{' '.join(self.cmd)}: {detail}")


class DiscoveryError(BackupError):
    """Raised when a source root cannot be scanned for trees or temp dirs."""
