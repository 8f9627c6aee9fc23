"""
Dependency analysis and ordering of planned commits.

Two commits depend on each other when they touch the same file; the
later one (in assembly order) depends on the earlier one. Ordering is a
single stable sort that respects direct dependencies and otherwise
prefers higher priority.
"""

import logging
from dataclasses import replace
from datetime import timedelta
from functools import cmp_to_key
from typing import List, Dict, Tuple

from .conventional import CommitType
from .models import CommitSize, CommitStrategy, PlannedCommit

logger = logging.getLogger(__name__)


BASE_COMMIT_MINUTES = 2
SIZE_EXTRA_MINUTES = {
    CommitSize.HUGE: 5,
    CommitSize.LARGE: 3,
    CommitSize.MEDIUM: 1,
    CommitSize.SMALL: 0,
}


def analyze_dependencies(commit: PlannedCommit, earlier: List[PlannedCommit]) -> List[str]:
    """
    Find the earlier commits that share a file with ``commit``.

    Args:
        commit: Commit to analyze
        earlier: Commits assembled before it

    Returns:
        Ids of earlier commits, in encounter order, without duplicates
    """
    files = set(commit.files)
    return [other.id for other in earlier if files.intersection(other.files)]


def build_dependency_map(
    commits: List[PlannedCommit]
) -> Tuple[List[PlannedCommit], Dict[str, List[str]]]:
    """
    Attach dependencies to each commit.

    Returns:
        New commits with ``dependencies`` set, and the id -> ids map
    """
    updated: List[PlannedCommit] = []
    dependencies: Dict[str, List[str]] = {}
    for i, commit in enumerate(commits):
        deps = analyze_dependencies(commit, commits[:i])
        dependencies[commit.id] = deps
        updated.append(replace(commit, dependencies=list(deps)))
    return updated, dependencies


def sort_commits_by_dependencies(
    commits: List[PlannedCommit],
    dependencies: Dict[str, List[str]]
) -> List[PlannedCommit]:
    """
    Order commits by direct dependency, then by descending priority.

    This is a stable comparison sort, not a topological sort: only
    direct edges are consulted. Cycles are reported by the validator.
    """

    def compare(a: PlannedCommit, b: PlannedCommit) -> int:
        if a.id in dependencies.get(b.id, []):
            return -1
        if b.id in dependencies.get(a.id, []):
            return 1
        return b.priority - a.priority

    return sorted(commits, key=cmp_to_key(compare))


def determine_strategy(commits: List[PlannedCommit]) -> CommitStrategy:
    """Label the plan by the kinds of commits it contains."""
    if len(commits) <= 1:
        return CommitStrategy.ATOMIC

    types = {c.type for c in commits}
    if CommitType.FEAT in types:
        return CommitStrategy.FEATURE
    if len(types) > 1:
        return CommitStrategy.LOGICAL
    return CommitStrategy.ATOMIC


def estimate_commit_time(commits: List[PlannedCommit]) -> timedelta:
    """Rough time needed to review and apply the commits."""
    minutes = sum(BASE_COMMIT_MINUTES + SIZE_EXTRA_MINUTES[c.size] for c in commits)
    return timedelta(minutes=minutes)


class CommitScheduler:
    """Computes dependencies and the final commit order."""

    def schedule(
        self,
        commits: List[PlannedCommit]
    ) -> Tuple[List[PlannedCommit], Dict[str, List[str]]]:
        """
        Args:
            commits: Commits in assembly order

        Returns:
            Ordered commits and the dependency map
        """
        with_deps, dependencies = build_dependency_map(commits)
        ordered = sort_commits_by_dependencies(with_deps, dependencies)

        edge_count = sum(len(d) for d in dependencies.values())
        logger.info(f"Scheduled {len(ordered)} commits with {edge_count} dependencies")
        return ordered, dependencies
