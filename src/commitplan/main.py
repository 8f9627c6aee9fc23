"""
Entry point for commitplan.

Reads the working-tree changes of the current repository, plans commits,
prints the plan and, unless running dry, applies it.

Configuration comes from the environment (optionally a .env file); see
PlannerConfig.from_env for the recognised variables.
"""

import os
import sys
from typing import Dict, Optional

from dotenv import load_dotenv

from .commit import CommitPlanner, PlannerConfig, ProjectContext
from .logging_config import configure_logging, get_logger
from .repository import (
    CommitExecutionError,
    CommitExecutor,
    GitChangeSource,
    RepositoryError,
)

logger = get_logger(__name__)


def load_config(env_file: Optional[str] = None) -> PlannerConfig:
    """
    Load planner configuration from a .env file and the environment.

    Variables already set in the environment win over the file.
    """
    load_dotenv(env_file)
    return PlannerConfig.from_env(dict(os.environ))


def run(env: Dict[str, str], config: PlannerConfig) -> int:
    """
    Plan (and optionally apply) commits for the configured repository.

    Returns:
        Process exit code
    """
    repo_path = env.get("COMMITPLAN_REPO_PATH", ".")

    try:
        source = GitChangeSource(repo_path)
        changes = source.get_changes()
    except RepositoryError as e:
        logger.error(str(e))
        return 1

    context = ProjectContext(
        branch_name=source.current_branch(),
        issue_number=env.get("COMMITPLAN_ISSUE_NUMBER") or None,
    )

    planner = CommitPlanner(config)
    plan = planner.create_plan(changes, context)
    print(planner.preview(plan))

    if plan.validation_result is not None and not plan.validation_result.valid:
        return 1

    if config.dry_run or plan.is_empty:
        return 0

    try:
        CommitExecutor(source.repo, dry_run=False).execute(plan)
    except CommitExecutionError as e:
        logger.error(str(e))
        return 1

    return 0


def main() -> int:
    """Console script entry point."""
    config = load_config()
    configure_logging()
    return run(dict(os.environ), config)


if __name__ == "__main__":
    sys.exit(main())
