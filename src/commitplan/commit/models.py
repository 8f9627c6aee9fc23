"""
Data model shared across the commit planning pipeline.

Changes flow forward through the pipeline:
FileChange -> ChangeGroup -> PlannedCommit -> CommitPlan -> ValidationResult
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Dict, Optional, Any

from .conventional import CommitType, ConventionalMessage


class ChangeType(Enum):
    """Kind of working-tree change reported for a file."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"
    RENAME = "rename"
    COPY = "copy"
    UNTRACKED = "untracked"


class GroupType(Enum):
    """Semantic category of a group of changes."""

    FEATURE = "feature"
    FIX = "fix"
    REFACTOR = "refactor"
    TEST = "test"
    DOCS = "docs"
    CONFIG = "config"
    STYLE = "style"
    MIXED = "mixed"


class CommitSize(Enum):
    """Size class of a commit, based on changed lines."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


class CommitStrategy(Enum):
    """Overall strategy label attached to a plan."""

    ATOMIC = "atomic"
    LOGICAL = "logical"
    FEATURE = "feature"
    FILE = "file"
    TEMPORAL = "temporal"


class ErrorSeverity(Enum):
    """Severity of a validation error."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def penalty(self) -> float:
        """Amount subtracted from the validation score."""
        return {
            ErrorSeverity.INFO: 0.0,
            ErrorSeverity.WARNING: 0.1,
            ErrorSeverity.ERROR: 0.3,
            ErrorSeverity.CRITICAL: 0.5,
        }[self]

    @property
    def is_blocking(self) -> bool:
        """Whether an error of this severity invalidates the result."""
        return self in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)


@dataclass(frozen=True)
class FileChange:
    """A single changed file in the working tree."""

    path: str
    change_type: ChangeType = ChangeType.MODIFY
    additions: int = 0
    deletions: int = 0
    binary: bool = False
    old_path: Optional[str] = None

    def __post_init__(self):
        if not self.path:
            raise ValueError("FileChange path must not be empty")
        if self.additions < 0 or self.deletions < 0:
            raise ValueError(
                f"Line counts must be non-negative for {self.path}: "
                f"+{self.additions} -{self.deletions}"
            )

    @property
    def total_lines(self) -> int:
        """Lines added plus lines deleted."""
        return self.additions + self.deletions


@dataclass
class ChangeGroup:
    """
    A candidate set of changes intended to become one commit.

    Groups are produced by the grouping strategies and replaced (never
    edited) by the refinement passes.
    """

    id: str
    group_type: GroupType
    description: str
    changes: List[FileChange]
    score: float = 0.0
    rationale: str = ""

    @property
    def size(self) -> int:
        """Number of changes in this group."""
        return len(self.changes)

    @property
    def file_paths(self) -> List[str]:
        """List of all file paths in this group."""
        return [c.path for c in self.changes]

    @property
    def total_additions(self) -> int:
        """Total lines added across all files."""
        return sum(c.additions for c in self.changes)

    @property
    def total_deletions(self) -> int:
        """Total lines deleted across all files."""
        return sum(c.deletions for c in self.changes)

    def __str__(self) -> str:
        return f"ChangeGroup({self.id}, {self.group_type.value}, {self.size} files, score={self.score:.2f})"


@dataclass
class PlannedCommit:
    """A commit in the plan, ready to be executed."""

    id: str
    message: ConventionalMessage
    changes: List[FileChange]
    type: CommitType = CommitType.CHORE
    scope: str = ""
    breaking: bool = False
    size: CommitSize = CommitSize.SMALL
    priority: int = 0
    dependencies: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.files:
            self.files = list(dict.fromkeys(c.path for c in self.changes))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return {
            "id": self.id,
            "message": self.message.full,
            "type": self.type.value,
            "scope": self.scope,
            "breaking": self.breaking,
            "size": self.size.value,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
            "files": list(self.files),
            "metadata": dict(self.metadata),
        }


@dataclass
class ValidationError:
    """A validation finding that carries a severity."""

    type: str
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    file: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        msg = f"{self.severity.value.upper()} [{self.type}]: {self.message}"
        if self.file:
            msg += f" ({self.file}"
            if self.line is not None:
                msg += f":{self.line}"
            msg += ")"
        return msg


@dataclass
class ValidationWarning:
    """A non-blocking validation finding with an optional suggestion."""

    type: str
    message: str
    suggestion: str = ""
    file: Optional[str] = None

    def __str__(self) -> str:
        msg = f"WARNING [{self.type}]: {self.message}"
        if self.file:
            msg += f" ({self.file})"
        if self.suggestion:
            msg += f"\n   Suggestion: {self.suggestion}"
        return msg


@dataclass
class ValidationResult:
    """Result of validating a message, a commit or a whole plan."""

    valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    score: float = 1.0
    suggestions: List[str] = field(default_factory=list)

    def add_error(
        self,
        error_type: str,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        file: Optional[str] = None,
        line: Optional[int] = None
    ) -> None:
        """Append an error; blocking severities invalidate the result."""
        self.errors.append(ValidationError(error_type, message, severity, file, line))
        if severity.is_blocking:
            self.valid = False

    def add_warning(
        self,
        warning_type: str,
        message: str,
        suggestion: str = "",
        file: Optional[str] = None
    ) -> None:
        """Append a warning and remember its suggestion."""
        self.warnings.append(ValidationWarning(warning_type, message, suggestion, file))
        if suggestion and suggestion not in self.suggestions:
            self.suggestions.append(suggestion)

    def merge(self, other: "ValidationResult") -> None:
        """Fold another result's findings into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        for suggestion in other.suggestions:
            if suggestion not in self.suggestions:
                self.suggestions.append(suggestion)
        if not other.valid:
            self.valid = False

    def calculate_score(self) -> float:
        """Recompute the score from the current findings and store it."""
        score = 1.0
        for error in self.errors:
            score -= error.severity.penalty
        score -= 0.05 * len(self.warnings)
        self.score = max(0.0, score)
        return self.score

    def format_report(self) -> str:
        """Format validation report for display."""
        if self.valid and not self.errors and not self.warnings:
            return f"✅ Validation passed (score {self.score:.2f})"

        lines = []
        if self.valid:
            lines.append(f"✅ Validation passed with findings (score {self.score:.2f}):")
        else:
            lines.append(f"❌ Validation failed (score {self.score:.2f}):")

        lines.append("")

        if self.errors:
            lines.append("Errors:")
            for error in self.errors:
                lines.append(f"  {error}")
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")
            lines.append("")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines).rstrip()


@dataclass
class CommitPlan:
    """An ordered sequence of planned commits."""

    commits: List[PlannedCommit] = field(default_factory=list)
    strategy: CommitStrategy = CommitStrategy.ATOMIC
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    total_changes: int = 0
    estimated_time: timedelta = field(default_factory=timedelta)
    validation_result: Optional[ValidationResult] = None

    @property
    def is_empty(self) -> bool:
        return not self.commits

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation for downstream consumers."""
        data: Dict[str, Any] = {
            "commits": [c.to_dict() for c in self.commits],
            "strategy": self.strategy.value,
            "dependencies": {k: list(v) for k, v in self.dependencies.items()},
            "total_changes": self.total_changes,
            "estimated_time_seconds": int(self.estimated_time.total_seconds()),
        }
        if self.validation_result is not None:
            data["validation"] = {
                "valid": self.validation_result.valid,
                "score": self.validation_result.score,
                "errors": [
                    {"type": e.type, "message": e.message, "severity": e.severity.value}
                    for e in self.validation_result.errors
                ],
                "warnings": [
                    {"type": w.type, "message": w.message, "suggestion": w.suggestion}
                    for w in self.validation_result.warnings
                ],
            }
        return data
