"""
Turns refined change groups into planned commits.

Each group becomes one PlannedCommit carrying a message, a commit type,
a scope, a breaking flag, a size class and a priority. Dependencies are
filled in later by the scheduler.
"""

import logging
from collections import Counter
from typing import List, Optional, Sequence

from .classifier import (
    is_breaking_change,
    is_config_file,
    is_doc_file,
    is_fix_path,
    is_test_file,
)
from .conventional import CommitType, ConventionalMessage
from .message_generator import (
    HeuristicMessageGenerator,
    MessageGenerationError,
    MessageGenerator,
    ProjectContext,
)
from .models import ChangeGroup, ChangeType, CommitSize, FileChange, PlannedCommit

logger = logging.getLogger(__name__)


# Priority contribution of each commit type (higher = earlier)
TYPE_PRIORITY = {
    CommitType.FIX: 20,
    CommitType.FEAT: 15,
    CommitType.BUILD: 14,
    CommitType.CI: 14,
    CommitType.REFACTOR: 12,
    CommitType.PERF: 12,
    CommitType.CHORE: 8,
    CommitType.REVERT: 6,
    CommitType.TEST: 5,
    CommitType.STYLE: 4,
    CommitType.DOCS: 3,
}

SIZE_PRIORITY = {
    CommitSize.SMALL: 10,
    CommitSize.MEDIUM: 5,
    CommitSize.LARGE: 0,
    CommitSize.HUGE: -5,
}

BASE_PRIORITY = 10
BREAKING_PRIORITY = 50


def determine_commit_type(changes: Sequence[FileChange]) -> CommitType:
    """
    Determine the commit type of a set of changes.

    Each file contributes its first matching indicator (test, doc,
    config, added, fix). Fixes outrank features, which outrank tests,
    then docs; everything else is a chore.

    Args:
        changes: Changes in the commit

    Returns:
        CommitType for the commit
    """
    has_test = has_doc = has_feature = has_fix = False

    for change in changes:
        path = change.path
        if is_test_file(path):
            has_test = True
        elif is_doc_file(path):
            has_doc = True
        elif is_config_file(path):
            continue
        elif change.change_type == ChangeType.ADD:
            has_feature = True
        elif is_fix_path(path):
            has_fix = True

    if has_fix:
        return CommitType.FIX
    if has_feature:
        return CommitType.FEAT
    if has_test:
        return CommitType.TEST
    if has_doc:
        return CommitType.DOCS
    return CommitType.CHORE


def determine_scope(changes: Sequence[FileChange]) -> str:
    """Most common top-level directory, "" for root-only changes."""
    counts: Counter = Counter()
    for change in changes:
        parts = change.path.split("/")
        if len(parts) > 1 and parts[0] not in ("", "."):
            counts[parts[0]] += 1

    if not counts:
        return ""
    return counts.most_common(1)[0][0]


def calculate_commit_size(changes: Sequence[FileChange]) -> CommitSize:
    """Size class from total changed lines."""
    total = sum(c.total_lines for c in changes)
    if total <= 10:
        return CommitSize.SMALL
    if total <= 50:
        return CommitSize.MEDIUM
    if total <= 200:
        return CommitSize.LARGE
    return CommitSize.HUGE


def calculate_priority(commit_type: CommitType, size: CommitSize, breaking: bool) -> int:
    """Scheduling priority; higher runs earlier."""
    priority = BASE_PRIORITY + TYPE_PRIORITY.get(commit_type, 0) + SIZE_PRIORITY[size]
    if breaking:
        priority += BREAKING_PRIORITY
    return priority


class CommitAssembler:
    """Builds PlannedCommits from groups."""

    def __init__(self, message_generator: Optional[MessageGenerator] = None):
        self.message_generator = message_generator or HeuristicMessageGenerator()

    def assemble(
        self,
        groups: List[ChangeGroup],
        context: Optional[ProjectContext] = None
    ) -> List[PlannedCommit]:
        """
        Create one commit per group, ids ``commit_1``, ``commit_2``, ...

        Args:
            groups: Refined groups, in order
            context: Optional project information for message generation

        Returns:
            Commits without dependencies
        """
        commits = []
        for i, group in enumerate(groups):
            commits.append(self.assemble_commit(f"commit_{i + 1}", group, context))
        logger.info(f"Assembled {len(commits)} commits")
        return commits

    def assemble_commit(
        self,
        commit_id: str,
        group: ChangeGroup,
        context: Optional[ProjectContext] = None
    ) -> PlannedCommit:
        changes = list(group.changes)
        commit_type = determine_commit_type(changes)
        size = calculate_commit_size(changes)
        breaking = is_breaking_change(changes)

        commit = PlannedCommit(
            id=commit_id,
            message=self._generate_message(group, context),
            changes=changes,
            type=commit_type,
            scope=determine_scope(changes),
            breaking=breaking,
            size=size,
            priority=calculate_priority(commit_type, size, breaking),
            metadata={
                "group_id": group.id,
                "group_type": group.group_type.value,
                "rationale": group.rationale,
            },
        )
        logger.debug(
            f"{commit.id}: {commit.type.value} from {group.id} "
            f"({len(commit.files)} files, priority {commit.priority})"
        )
        return commit

    def _generate_message(
        self,
        group: ChangeGroup,
        context: Optional[ProjectContext]
    ) -> ConventionalMessage:
        try:
            return self.message_generator.generate(group.changes, context)
        except MessageGenerationError as e:
            logger.warning(f"Message generation failed for {group.id}, using fallback: {e}")
            return self.message_generator.fallback(group.changes, context)
