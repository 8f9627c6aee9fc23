"""
Commit planning pipeline.

CommitPlanner wires the stages together:
changes -> groups -> refined groups -> planned commits -> ordered plan
-> validation.

Configuration can be built from environment variables with
PlannerConfig.from_env(os.environ).
"""

import logging
from dataclasses import dataclass
from typing import List, Dict, Optional, Tuple

from .assembler import CommitAssembler
from .grouping import ChangeGrouper, GroupingConfig
from .message_generator import (
    HeuristicMessageGenerator,
    MessageGenerator,
    MessageGeneratorConfig,
    MessageStyle,
    ProjectContext,
)
from .models import CommitPlan, CommitStrategy, FileChange
from .refinement import GroupRefiner
from .scheduler import CommitScheduler, determine_strategy, estimate_commit_time
from .validator import CommitValidator, ValidatorConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannerConfig:
    """Configuration for the commit planning pipeline."""

    conventional_commits: bool = True
    max_commit_size: int = 100
    atomic_commits: bool = False
    group_by_type: bool = False
    group_by_module: bool = False
    group_by_feature: bool = False
    separate_tests: bool = False
    separate_docs: bool = False
    min_group_size: int = 1
    max_group_size: int = 20
    validate_before_commit: bool = True
    message_style: MessageStyle = MessageStyle.CONVENTIONAL
    max_subject_length: int = 50
    required_scopes: Tuple[str, ...] = ()
    commit_template: str = ""
    dry_run: bool = True

    @classmethod
    def from_env(cls, env_dict: Dict[str, str]) -> "PlannerConfig":
        """Create config from environment variables"""

        def get_bool(key: str, default: bool) -> bool:
            val = env_dict.get(key, str(default)).lower()
            return val in ("true", "1", "yes")

        def get_int(key: str, default: int) -> int:
            try:
                return int(env_dict.get(key, str(default)))
            except ValueError:
                return default

        def get_positive_int(key: str, default: int) -> int:
            value = get_int(key, default)
            return value if value > 0 else default

        scopes = env_dict.get("COMMITPLAN_REQUIRED_SCOPES", "")

        return cls(
            conventional_commits=get_bool("COMMITPLAN_CONVENTIONAL_COMMITS", True),
            max_commit_size=get_positive_int("COMMITPLAN_MAX_COMMIT_SIZE", 100),
            atomic_commits=get_bool("COMMITPLAN_ATOMIC_COMMITS", False),
            group_by_type=get_bool("COMMITPLAN_GROUP_BY_TYPE", False),
            group_by_module=get_bool("COMMITPLAN_GROUP_BY_MODULE", False),
            group_by_feature=get_bool("COMMITPLAN_GROUP_BY_FEATURE", False),
            separate_tests=get_bool("COMMITPLAN_SEPARATE_TESTS", False),
            separate_docs=get_bool("COMMITPLAN_SEPARATE_DOCS", False),
            min_group_size=get_positive_int("COMMITPLAN_MIN_GROUP_SIZE", 1),
            max_group_size=get_positive_int("COMMITPLAN_MAX_GROUP_SIZE", 20),
            validate_before_commit=get_bool("COMMITPLAN_VALIDATE", True),
            message_style=MessageStyle.from_value(env_dict.get("COMMITPLAN_MESSAGE_STYLE", "conventional")),
            max_subject_length=get_positive_int("COMMITPLAN_MAX_SUBJECT_LENGTH", 50),
            required_scopes=tuple(s.strip() for s in scopes.split(",") if s.strip()),
            commit_template=env_dict.get("COMMITPLAN_COMMIT_TEMPLATE", ""),
            dry_run=get_bool("COMMITPLAN_DRY_RUN", True),
        )

    def grouping_config(self) -> GroupingConfig:
        return GroupingConfig(
            atomic_changes=self.atomic_commits,
            group_by_type=self.group_by_type,
            group_by_module=self.group_by_module,
            group_by_feature=self.group_by_feature,
            separate_tests=self.separate_tests,
            separate_docs=self.separate_docs,
            max_commit_size=self.max_commit_size,
            min_group_size=self.min_group_size,
            max_group_size=self.max_group_size,
        )

    def message_config(self) -> MessageGeneratorConfig:
        return MessageGeneratorConfig(
            style=self.message_style,
            max_length=self.max_subject_length,
            required_scopes=self.required_scopes,
            template=self.commit_template,
        )

    def validator_config(self) -> ValidatorConfig:
        return ValidatorConfig(
            conventional_commits=self.conventional_commits and self.message_style != MessageStyle.TRADITIONAL,
            max_subject_length=self.max_subject_length,
            required_scopes=self.required_scopes,
            max_commit_size=self.max_commit_size,
        )


class CommitPlanner:
    """
    Plans commits for a set of working-tree changes.

    Example:
        >>> planner = CommitPlanner(PlannerConfig(separate_tests=True))
        >>> plan = planner.create_plan(changes)
        >>> print(planner.preview(plan))
    """

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        message_generator: Optional[MessageGenerator] = None,
        validator: Optional[CommitValidator] = None
    ):
        self.config = config or PlannerConfig()
        grouping_config = self.config.grouping_config()

        self.grouper = ChangeGrouper(grouping_config)
        self.refiner = GroupRefiner(grouping_config)
        self.assembler = CommitAssembler(
            message_generator or HeuristicMessageGenerator(self.config.message_config())
        )
        self.scheduler = CommitScheduler()
        self.validator = validator or CommitValidator(self.config.validator_config())

    def create_plan(
        self,
        changes: List[FileChange],
        context: Optional[ProjectContext] = None
    ) -> CommitPlan:
        """
        Create an ordered, validated commit plan.

        Args:
            changes: Working-tree changes
            context: Optional project information for messages

        Returns:
            CommitPlan; empty (atomic, no commits) for empty input
        """
        if not changes:
            logger.info("No changes to plan")
            return CommitPlan(strategy=CommitStrategy.ATOMIC)

        logger.info(f"Planning commits for {len(changes)} changes")

        groups = self.grouper.group(changes)
        groups = self.refiner.refine(groups)
        groups = self.refiner.adjust_group_sizes(groups)

        commits = self.assembler.assemble(groups, context)
        commits, dependencies = self.scheduler.schedule(commits)

        plan = CommitPlan(
            commits=commits,
            strategy=determine_strategy(commits),
            dependencies=dependencies,
            total_changes=len(changes),
            estimated_time=estimate_commit_time(commits),
        )

        if self.config.validate_before_commit:
            plan.validation_result = self.validator.validate_plan(plan)
            if not plan.validation_result.valid:
                logger.warning(
                    f"Commit plan failed validation with {len(plan.validation_result.errors)} errors"
                )

        logger.info(
            f"Planned {len(plan.commits)} commits ({plan.strategy.value}), "
            f"estimated {plan.estimated_time}"
        )
        return plan

    def preview(self, plan: CommitPlan) -> str:
        """
        Render a plan for display.

        Args:
            plan: Plan to render

        Returns:
            Multi-line text preview
        """
        if plan.is_empty:
            return "No commits planned."

        minutes = int(plan.estimated_time.total_seconds() // 60)
        lines = [
            f"Commit plan: {len(plan.commits)} commits, {plan.total_changes} changes",
            f"Strategy: {plan.strategy.value}",
            f"Estimated time: {minutes} min",
            "",
        ]

        for i, commit in enumerate(plan.commits, start=1):
            breaking = " [BREAKING]" if commit.breaking else ""
            lines.append(f"{i}. [{commit.id}] {commit.message.header}{breaking}")
            lines.append(f"     {commit.type.description}")
            scope = f", scope: {commit.scope}" if commit.scope else ""
            lines.append(
                f"     type: {commit.type.value}{scope}, size: {commit.size.value}, "
                f"priority: {commit.priority}"
            )
            for path in commit.files:
                lines.append(f"     {path}")
            if commit.dependencies:
                lines.append(f"     depends on: {', '.join(commit.dependencies)}")
            lines.append("")

        if plan.validation_result is not None:
            lines.append(plan.validation_result.format_report())

        return "\n".join(lines).rstrip()
