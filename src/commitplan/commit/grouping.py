"""
Commit grouping strategies.

Builds the initial candidate groups for a set of file changes:
- Atomic: one group per change
- By change type, module or feature: one group per bucket key
- Logical fallback: tests, docs, config and code kept apart

Buckets are always emitted in a deterministic order so the same input
produces the same groups on every run.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import List, Dict, Optional, Sequence, Callable, Iterable

from .classifier import (
    classify_change,
    determine_group_type,
    detect_feature,
    directory_of,
    extension_of,
    extract_module,
)
from .models import ChangeGroup, ChangeType, FileChange, GroupType

logger = logging.getLogger(__name__)


DEFAULT_MAX_COMMIT_SIZE = 100
DEFAULT_MIN_GROUP_SIZE = 1
DEFAULT_MAX_GROUP_SIZE = 20


@dataclass(frozen=True)
class GroupingConfig:
    """Configuration for grouping and refinement."""

    atomic_changes: bool = False
    group_by_type: bool = False
    group_by_module: bool = False
    group_by_feature: bool = False
    separate_tests: bool = False
    separate_docs: bool = False
    max_commit_size: int = DEFAULT_MAX_COMMIT_SIZE
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE
    max_group_size: int = DEFAULT_MAX_GROUP_SIZE

    def with_defaults(self) -> "GroupingConfig":
        """Return a copy with unset (non-positive) sizes replaced by defaults."""
        return replace(
            self,
            max_commit_size=self.max_commit_size if self.max_commit_size > 0 else DEFAULT_MAX_COMMIT_SIZE,
            min_group_size=self.min_group_size if self.min_group_size > 0 else DEFAULT_MIN_GROUP_SIZE,
            max_group_size=self.max_group_size if self.max_group_size > 0 else DEFAULT_MAX_GROUP_SIZE,
        )


def calculate_group_score(changes: Sequence[FileChange], max_commit_size: int) -> float:
    """
    Score how cohesive a set of changes is.

    Higher is better. Shared extension and directory raise the score,
    many change types lower it, and small groups get a bonus.

    Args:
        changes: Changes in the group
        max_commit_size: Commit size bound used for the small-group bonus

    Returns:
        Score, 0.0 for an empty group
    """
    if not changes:
        return 0.0

    score = 1.0

    extensions = {extension_of(c.path) for c in changes}
    if len(extensions) == 1:
        score += 0.3
    elif len(extensions) <= 3:
        score += 0.1

    directories = {directory_of(c.path) for c in changes}
    if len(directories) == 1:
        score += 0.2

    change_types = {c.change_type for c in changes}
    if len(change_types) > 2:
        score -= 0.2

    if len(changes) <= max_commit_size // 4:
        score += 0.1

    return score


def generate_description(changes: Sequence[FileChange], group_type: GroupType) -> str:
    """Human-readable summary of a group."""
    if len(changes) == 1:
        return f"Update {changes[0].path}"

    count = len(changes)
    if group_type == GroupType.TEST:
        return f"Update tests ({count} files)"
    if group_type == GroupType.DOCS:
        return f"Update documentation ({count} files)"
    if group_type == GroupType.CONFIG:
        return f"Update configuration ({count} files)"
    if group_type == GroupType.FEATURE:
        return f"Add new features ({count} files)"
    if group_type == GroupType.FIX:
        return f"Fix issues ({count} files)"
    return f"Update {count} files"


def build_group(
    group_id: str,
    changes: List[FileChange],
    rationale: str,
    max_commit_size: int,
    group_type: Optional[GroupType] = None,
    description: Optional[str] = None,
    score: Optional[float] = None
) -> ChangeGroup:
    """
    Create a ChangeGroup with derived type, description and score.

    Any of the derived fields can be pinned by passing it explicitly.
    """
    if group_type is None:
        group_type = determine_group_type(changes)
    if description is None:
        description = generate_description(changes, group_type)
    if score is None:
        score = calculate_group_score(changes, max_commit_size)

    return ChangeGroup(
        id=group_id,
        group_type=group_type,
        description=description,
        changes=list(changes),
        score=score,
        rationale=rationale,
    )


def bucket_changes(
    changes: Iterable[FileChange],
    key: Callable[[FileChange], str]
) -> Dict[str, List[FileChange]]:
    """Bucket changes by key, preserving input order inside each bucket."""
    buckets: Dict[str, List[FileChange]] = defaultdict(list)
    for change in changes:
        buckets[key(change)].append(change)
    return buckets


class GroupingStrategy(ABC):
    """
    Abstract base class for grouping strategies.

    Strategies implement different approaches to turning a flat list of
    changes into candidate commit groups.
    """

    def __init__(self, config: GroupingConfig):
        self.config = config

    @abstractmethod
    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        """
        Group changes into candidate commits.

        Args:
            changes: File changes to group

        Returns:
            List of groups, never containing an empty group
        """
        pass

    def _build(self, group_id: str, changes: List[FileChange], rationale: str, **kwargs) -> ChangeGroup:
        return build_group(group_id, changes, rationale, self.config.max_commit_size, **kwargs)


class AtomicGrouping(GroupingStrategy):
    """One group per change."""

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        return [
            self._build(f"atomic_{i + 1}", [change], "Atomic commit strategy", score=1.0)
            for i, change in enumerate(changes)
        ]


class ChangeTypeGrouping(GroupingStrategy):
    """Group changes that share a change type (add, modify, delete, ...)."""

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        buckets: Dict[ChangeType, List[FileChange]] = defaultdict(list)
        for change in changes:
            buckets[change.change_type].append(change)

        groups = []
        for change_type in ChangeType:
            members = buckets.get(change_type)
            if members:
                groups.append(self._build(
                    f"type_{change_type.value}",
                    members,
                    f"Grouped by change type: {change_type.value}",
                ))
        return groups


class ModuleGrouping(GroupingStrategy):
    """Group changes by top-level module directory."""

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        buckets = bucket_changes(changes, lambda c: extract_module(c.path))
        return [
            self._build(f"module_{module}", buckets[module], f"Grouped by module: {module}")
            for module in sorted(buckets)
        ]


class FeatureGrouping(GroupingStrategy):
    """Group changes by the feature their path points at."""

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        buckets = bucket_changes(changes, lambda c: detect_feature(c.path))
        return [
            self._build(f"feature_{feature}", buckets[feature], f"Grouped by feature: {feature}")
            for feature in sorted(buckets)
        ]


class LogicalGrouping(GroupingStrategy):
    """
    Fallback grouping: code, tests, docs and config.

    Tests and docs are folded into the code bucket unless configured to
    be separated. Config is always kept apart. Oversized code buckets are
    split by directory.
    """

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        code: List[FileChange] = []
        tests: List[FileChange] = []
        docs: List[FileChange] = []
        config: List[FileChange] = []

        for change in changes:
            tag = classify_change(change)
            if tag == GroupType.TEST:
                (tests if self.config.separate_tests else code).append(change)
            elif tag == GroupType.DOCS:
                (docs if self.config.separate_docs else code).append(change)
            elif tag == GroupType.CONFIG:
                config.append(change)
            else:
                code.append(change)

        groups: List[ChangeGroup] = []

        if code:
            if len(code) <= self.config.max_group_size:
                groups.append(self._build("code_changes", code, "Logical grouping of code changes"))
            else:
                groups.extend(self._group_by_directory(code))

        if tests:
            groups.append(self._build(
                "tests", tests, "Separated test changes",
                group_type=GroupType.TEST, description="Test updates",
            ))
        if docs:
            groups.append(self._build(
                "docs", docs, "Separated documentation changes",
                group_type=GroupType.DOCS, description="Documentation updates",
            ))
        if config:
            groups.append(self._build(
                "config", config, "Separated configuration changes",
                group_type=GroupType.CONFIG, description="Configuration changes",
            ))

        if not groups and changes:
            groups.append(self._build(
                "all_changes", list(changes), "All changes in single commit",
                group_type=GroupType.MIXED,
            ))

        return groups

    def _group_by_directory(self, changes: List[FileChange]) -> List[ChangeGroup]:
        def key(change: FileChange) -> str:
            directory = directory_of(change.path)
            return "root" if directory == "." else directory

        buckets = bucket_changes(changes, key)
        return [
            self._build(
                f"dir_{directory.replace('/', '_')}",
                buckets[directory],
                f"Grouped by directory: {directory}",
            )
            for directory in sorted(buckets)
        ]


class ChangeGrouper:
    """
    Selects and runs grouping strategies.

    Atomic grouping overrides everything else. Type, module and feature
    grouping may be combined; their groups are concatenated and can
    overlap. Without any enabled strategy the logical fallback runs.
    """

    def __init__(self, config: Optional[GroupingConfig] = None):
        self.config = (config or GroupingConfig()).with_defaults()

    def strategies(self) -> List[GroupingStrategy]:
        """Strategies selected by the configuration, in run order."""
        if self.config.atomic_changes:
            return [AtomicGrouping(self.config)]

        selected: List[GroupingStrategy] = []
        if self.config.group_by_type:
            selected.append(ChangeTypeGrouping(self.config))
        if self.config.group_by_module:
            selected.append(ModuleGrouping(self.config))
        if self.config.group_by_feature:
            selected.append(FeatureGrouping(self.config))

        if not selected:
            return [LogicalGrouping(self.config)]

        if len(selected) > 1:
            logger.warning(
                f"{len(selected)} grouping strategies enabled; "
                "a change may appear in more than one group"
            )
        return selected

    def group(self, changes: List[FileChange]) -> List[ChangeGroup]:
        """
        Group changes with the configured strategies.

        Args:
            changes: File changes to group

        Returns:
            Candidate groups; empty for empty input
        """
        if not changes:
            return []

        groups: List[ChangeGroup] = []
        for strategy in self.strategies():
            produced = strategy.group(changes)
            logger.debug(f"{type(strategy).__name__} produced {len(produced)} groups")
            groups.extend(produced)

        logger.info(f"Grouped {len(changes)} changes into {len(groups)} groups")
        return groups
