"""
Applies a commit plan to a local git repository.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from git import Repo, GitCommandError

from ..commit.models import CommitPlan, PlannedCommit

logger = logging.getLogger(__name__)


class CommitExecutionError(Exception):
    """Raised when a planned commit cannot be applied."""
    pass


@dataclass
class ExecutionResult:
    """Outcome of executing a plan."""

    dry_run: bool
    commit_shas: List[str] = field(default_factory=list)
    preview: str = ""


class CommitExecutor:
    """
    Stages and commits each planned commit in order.

    The index is reset before the first commit so that only the files
    of each planned commit end up in it.

    Example:
        >>> executor = CommitExecutor(repo, dry_run=False)
        >>> result = executor.execute(plan)
        >>> print(result.commit_shas)
    """

    def __init__(self, repo: Repo, dry_run: bool = True):
        self.repo = repo
        self.dry_run = dry_run

    def execute(self, plan: CommitPlan) -> ExecutionResult:
        """
        Execute the plan.

        Args:
            plan: Ordered commit plan

        Returns:
            ExecutionResult with created SHAs, or a preview on dry run

        Raises:
            CommitExecutionError: If staging or committing fails
        """
        if self.dry_run:
            logger.info(f"Dry run: {len(plan.commits)} commits not applied")
            return ExecutionResult(dry_run=True, preview=self.preview(plan))

        result = ExecutionResult(dry_run=False)
        if plan.is_empty:
            return result

        try:
            if self.repo.head.is_valid():
                self.repo.git.reset("-q")
        except GitCommandError as e:
            raise CommitExecutionError(f"Failed to reset index: {e}") from e

        for commit in plan.commits:
            result.commit_shas.append(self.execute_commit(commit))

        logger.info(f"Created {len(result.commit_shas)} commits")
        return result

    def execute_commit(self, commit: PlannedCommit) -> str:
        """
        Stage the commit's files and create the commit.

        Returns:
            Commit SHA (hex string)
        """
        paths = list(commit.files)
        for change in commit.changes:
            if change.old_path and change.old_path not in paths:
                paths.append(change.old_path)

        try:
            self.repo.git.add("-A", "--", *paths)
            created = self.repo.index.commit(commit.message.full)
        except GitCommandError as e:
            raise CommitExecutionError(f"Failed to create {commit.id}: {e}") from e

        logger.info(f"Committed {commit.id}: {created.hexsha[:8]} {commit.message.header}")
        return created.hexsha

    @staticmethod
    def preview(plan: CommitPlan) -> str:
        """Render the git commands the plan would run."""
        lines = []
        for commit in plan.commits:
            lines.append(f"git add -A -- {' '.join(commit.files)}")
            lines.append(f"git commit -m {commit.message.header!r}")
        return "\n".join(lines)
