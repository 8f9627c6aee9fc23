"""
Local git repository access.

Reads working-tree changes and applies commit plans.
"""

from .status import (
    StatusParseError,
    parse_status_line,
    parse_status_output,
    parse_numstat,
    apply_numstat,
)
from .git_source import GitChangeSource, RepositoryError, open_repo
from .executor import CommitExecutor, CommitExecutionError, ExecutionResult

__all__ = [
    "StatusParseError",
    "parse_status_line",
    "parse_status_output",
    "parse_numstat",
    "apply_numstat",
    "GitChangeSource",
    "RepositoryError",
    "open_repo",
    "CommitExecutor",
    "CommitExecutionError",
    "ExecutionResult",
]
