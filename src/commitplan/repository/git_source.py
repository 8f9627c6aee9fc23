"""
Working-tree change source backed by GitPython.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..commit.models import FileChange
from .status import apply_numstat, parse_numstat, parse_status_output

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when the repository cannot be opened or read."""
    pass


def open_repo(repo_path: Union[str, Path]) -> Repo:
    """
    Open the git repository containing ``repo_path``.

    Raises:
        RepositoryError: If no repository is found
    """
    try:
        return Repo(str(repo_path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryError(f"Not a git repository: {repo_path}") from e


class GitChangeSource:
    """
    Reads the current working-tree changes of a repository.

    Example:
        >>> source = GitChangeSource(".")
        >>> changes = source.get_changes()
    """

    def __init__(self, repo_path: Union[str, Path] = ".", repo: Optional[Repo] = None):
        self.repo = repo if repo is not None else open_repo(repo_path)

    def get_changes(self) -> List[FileChange]:
        """
        List changed files with line statistics.

        Returns:
            Changes in ``git status`` order

        Raises:
            RepositoryError: If ``git status`` fails
        """
        try:
            status_output = self.repo.git.status("--porcelain", strip_newline_in_stdout=False)
        except GitCommandError as e:
            raise RepositoryError(f"git status failed: {e}") from e

        changes = parse_status_output(status_output)
        if not changes:
            return []

        try:
            numstat_output = self.repo.git.diff("--numstat", "HEAD")
        except GitCommandError as e:
            # No HEAD yet (fresh repository) or similar: keep zero counts
            logger.warning(f"Could not read diff statistics: {e}")
            return changes

        changes = apply_numstat(changes, parse_numstat(numstat_output))
        logger.info(f"Found {len(changes)} changed files")
        return changes

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, None when detached."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            return None
