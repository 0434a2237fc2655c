"""backup-repos CLI: back up unpushed work in git repos."""

from ._helpers import main  # noqa: F401  (entry point)

# Import command modules to register Click commands with the main group.
from . import _backup, _orphans  # noqa: F401
