"""
Commit planning module.

Turns an unordered set of working-tree changes into an ordered plan of
atomic, validated commits.

**Main Components:**
- **models**: Changes, groups, planned commits, plans and validation results
- **classifier**: Path heuristics (tests, docs, config, modules, features)
- **grouping**: Initial grouping strategies and group scoring
- **refinement**: Merge-small, split-large and score ordering passes
- **message_generator**: Rule-based commit message generation
- **assembler**: Groups to planned commits (type, scope, size, priority)
- **scheduler**: File-overlap dependencies and commit ordering
- **validator**: Message, commit and plan validation with scoring
- **planner**: The end-to-end pipeline
"""

from .conventional import (
    CommitType,
    ConventionalMessage,
    format_conventional_message,
    parse_conventional_message,
)

from .models import (
    ChangeType,
    GroupType,
    CommitSize,
    CommitStrategy,
    ErrorSeverity,
    FileChange,
    ChangeGroup,
    PlannedCommit,
    CommitPlan,
    ValidationError,
    ValidationWarning,
    ValidationResult,
)

from .grouping import (
    GroupingConfig,
    ChangeGrouper,
    calculate_group_score,
)

from .refinement import (
    GroupRefiner,
    split_group,
)

from .message_generator import (
    MessageGenerator,
    HeuristicMessageGenerator,
    MessageGeneratorConfig,
    MessageGenerationError,
    MessageStyle,
    ProjectContext,
)

from .validator import (
    CommitValidator,
    ValidatorConfig,
    ValidationRule,
    ValidationScope,
    has_cyclic_dependency,
)

from .planner import (
    CommitPlanner,
    PlannerConfig,
)

__all__ = [
    # Conventional commits
    "CommitType",
    "ConventionalMessage",
    "format_conventional_message",
    "parse_conventional_message",
    # Data model
    "ChangeType",
    "GroupType",
    "CommitSize",
    "CommitStrategy",
    "ErrorSeverity",
    "FileChange",
    "ChangeGroup",
    "PlannedCommit",
    "CommitPlan",
    "ValidationError",
    "ValidationWarning",
    "ValidationResult",
    # Grouping and refinement
    "GroupingConfig",
    "ChangeGrouper",
    "calculate_group_score",
    "GroupRefiner",
    "split_group",
    # Message generation
    "MessageGenerator",
    "HeuristicMessageGenerator",
    "MessageGeneratorConfig",
    "MessageGenerationError",
    "MessageStyle",
    "ProjectContext",
    # Validation
    "CommitValidator",
    "ValidatorConfig",
    "ValidationRule",
    "ValidationScope",
    "has_cyclic_dependency",
    # Planning
    "CommitPlanner",
    "PlannerConfig",
]
