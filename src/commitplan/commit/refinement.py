"""
Refinement passes applied to candidate groups.

Each pass takes a list of groups and returns a new list; groups are
replaced wholesale when merged or split, never edited in place.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import List, Dict, Optional

from .classifier import extension_of
from .grouping import GroupingConfig, build_group, calculate_group_score
from .models import ChangeGroup, FileChange, GroupType

logger = logging.getLogger(__name__)


def split_group(group: ChangeGroup, max_size: int, max_commit_size: int) -> List[ChangeGroup]:
    """
    Split a group into pieces of at most ``max_size`` changes.

    Changes are first bucketed by file extension (sorted, with files
    lacking one under "no_ext"), then each bucket is chunked. Pieces are
    numbered sequentially across buckets.

    Args:
        group: Group to split
        max_size: Maximum changes per resulting group
        max_commit_size: Commit size bound used for rescoring

    Returns:
        ``[group]`` when it already fits, otherwise the split pieces
    """
    if max_size <= 0 or group.size <= max_size:
        return [group]

    buckets: Dict[str, List[FileChange]] = defaultdict(list)
    for change in group.changes:
        buckets[extension_of(change.path) or "no_ext"].append(change)

    pieces: List[ChangeGroup] = []
    for ext in sorted(buckets):
        members = buckets[ext]
        for start in range(0, len(members), max_size):
            chunk = members[start:start + max_size]
            pieces.append(build_group(
                f"{group.id}_split_{len(pieces) + 1}",
                chunk,
                f"Split from large group by extension: {ext}",
                max_commit_size,
                group_type=group.group_type,
            ))

    logger.debug(f"Split {group.id} ({group.size} changes) into {len(pieces)} groups")
    return pieces


class RefinementPass(ABC):
    """A single transformation over the list of groups."""

    @abstractmethod
    def refine(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        """
        Refine groups.

        Args:
            groups: Current groups

        Returns:
            New list of groups
        """
        pass


class MergeSmallGroups(RefinementPass):
    """Merge groups below the minimum size into one group per group type."""

    def __init__(self, min_group_size: int, max_commit_size: int):
        self.min_group_size = min_group_size
        self.max_commit_size = max_commit_size

    def refine(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        kept: List[ChangeGroup] = []
        small: Dict[GroupType, List[ChangeGroup]] = defaultdict(list)

        for group in groups:
            if group.size < self.min_group_size:
                small[group.group_type].append(group)
            else:
                kept.append(group)

        if not small:
            return kept

        for group_type in GroupType:
            members = small.get(group_type)
            if not members:
                continue

            changes = [c for g in members for c in g.changes]
            kept.append(ChangeGroup(
                id=f"merged_{group_type.value}",
                group_type=group_type,
                description="; ".join(g.description for g in members),
                changes=changes,
                score=calculate_group_score(changes, self.max_commit_size),
                rationale="Merged small groups of same type",
            ))
            logger.debug(f"Merged {len(members)} small {group_type.value} groups")

        return kept


class SplitLargeGroups(RefinementPass):
    """Split groups above the maximum size."""

    def __init__(self, max_group_size: int, max_commit_size: int):
        self.max_group_size = max_group_size
        self.max_commit_size = max_commit_size

    def refine(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        result: List[ChangeGroup] = []
        for group in groups:
            result.extend(split_group(group, self.max_group_size, self.max_commit_size))
        return result


class ScoreOrdering(RefinementPass):
    """Order groups by descending score; ties keep their order."""

    def refine(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        return sorted(groups, key=lambda g: g.score, reverse=True)


class GroupRefiner:
    """
    Runs the refinement pipeline: merge small, split large, order by score.

    After ``refine`` every group has at most ``max_group_size`` changes;
    after ``adjust_group_sizes`` at most ``max_commit_size``.
    """

    def __init__(self, config: Optional[GroupingConfig] = None):
        self.config = (config or GroupingConfig()).with_defaults()
        self.passes: List[RefinementPass] = [
            MergeSmallGroups(self.config.min_group_size, self.config.max_commit_size),
            SplitLargeGroups(self.config.max_group_size, self.config.max_commit_size),
            ScoreOrdering(),
        ]

    def refine(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        """Apply all refinement passes in order."""
        for refinement in self.passes:
            groups = refinement.refine(groups)
            logger.debug(f"{type(refinement).__name__}: {len(groups)} groups")
        return groups

    def adjust_group_sizes(self, groups: List[ChangeGroup]) -> List[ChangeGroup]:
        """Split any group still larger than the commit size bound."""
        adjusted = SplitLargeGroups(self.config.max_commit_size, self.config.max_commit_size).refine(groups)
        if len(adjusted) != len(groups):
            logger.info(f"Adjusted group sizes: {len(groups)} -> {len(adjusted)} groups")
        return adjusted
