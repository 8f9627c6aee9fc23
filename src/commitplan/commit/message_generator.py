"""
Rule-based commit message generation.

Generates commit messages from a set of file changes using path and
change-type heuristics. Three styles are supported:
- conventional: ``type(scope)!: subject`` with body and footer
- traditional: capitalised summary line with a file list body
- custom: a ``string.Template`` filled with change context
"""

import logging
import posixpath
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from string import Template
from typing import List, Dict, Optional, Tuple

from .classifier import (
    is_breaking_change,
    is_build_file,
    is_config_file,
    is_doc_file,
    is_fix_path,
    is_style_file,
    is_test_file,
)
from .conventional import (
    BREAKING_CHANGE_MARKER,
    CommitType,
    ConventionalMessage,
    format_conventional_message,
    parse_conventional_message,
)
from .models import ChangeType, FileChange

logger = logging.getLogger(__name__)


class MessageGenerationError(Exception):
    """Raised when a commit message cannot be generated."""
    pass


class MessageStyle(Enum):
    """Output style of generated messages."""

    CONVENTIONAL = "conventional"
    TRADITIONAL = "traditional"
    CUSTOM = "custom"

    @classmethod
    def from_value(cls, value: str) -> "MessageStyle":
        try:
            return cls(value.lower())
        except ValueError:
            logger.warning(f"Unknown message style '{value}', using conventional")
            return cls.CONVENTIONAL


@dataclass(frozen=True)
class MessageGeneratorConfig:
    """Configuration for the heuristic message generator."""

    style: MessageStyle = MessageStyle.CONVENTIONAL
    max_length: int = 50
    required_scopes: Tuple[str, ...] = ()
    template: str = ""
    include_co_authors: bool = False
    include_references: bool = True
    auto_detect_type: bool = False
    auto_detect_scope: bool = False


@dataclass
class ProjectContext:
    """Optional project information used to enrich messages."""

    branch_name: Optional[str] = None
    issue_number: Optional[str] = None
    main_language: Optional[str] = None
    co_authors: List[str] = field(default_factory=list)


@dataclass
class ChangeSummary:
    """Changes split by kind, with derived feature and fix names."""

    changes: List[FileChange]
    added: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    fixes: List[str] = field(default_factory=list)
    total_additions: int = 0
    total_deletions: int = 0

    @classmethod
    def from_changes(cls, changes: List[FileChange]) -> "ChangeSummary":
        summary = cls(changes=list(changes))
        for change in changes:
            if change.change_type == ChangeType.ADD:
                summary.added.append(change.path)
            elif change.change_type == ChangeType.MODIFY:
                summary.modified.append(change.path)
            elif change.change_type == ChangeType.DELETE:
                summary.deleted.append(change.path)
            summary.total_additions += change.additions
            summary.total_deletions += change.deletions

        summary.features = _deduplicate(
            _feature_name(c.path) for c in changes if c.change_type == ChangeType.ADD
        )
        summary.fixes = _deduplicate(_fix_name(c.path) for c in changes if is_fix_path(c.path))
        return summary


def _deduplicate(items) -> List[str]:
    return [item for item in dict.fromkeys(items) if item]


def _stem(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[0]


def _feature_name(path: str) -> str:
    return _stem(path).replace("_", " ").replace("-", " ")


def _fix_name(path: str) -> str:
    name = _stem(path)
    if name.startswith("fix_"):
        name = name[len("fix_"):]
    if name.startswith("bug_"):
        name = name[len("bug_"):]
    return name.replace("_", " ")


def _limit_files(paths: List[str], limit: int = 3) -> List[str]:
    """Full paths when few, otherwise the first basenames."""
    if len(paths) <= limit:
        return paths
    return [posixpath.basename(p) for p in paths[:limit]]


def truncate_subject(subject: str, max_length: int) -> str:
    """Shorten a subject to ``max_length`` on a word boundary."""
    if max_length <= 0 or len(subject) <= max_length:
        return subject
    cut = subject[:max_length]
    if subject[max_length] != " " and " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" .,;:")


# Path fragments mapped to scopes during scope auto-detection
SCOPE_PATTERNS: List[Tuple[str, str]] = [
    ("api", "api"),
    ("ui", "ui"),
    ("frontend", "ui"),
    ("backend", "backend"),
    ("server", "backend"),
    ("db", "db"),
    ("database", "db"),
    ("auth", "auth"),
    ("config", "config"),
]

SCOPE_NORMALIZATION = {
    "database": "db",
    "frontend": "ui",
    "server": "backend",
    "authentication": "auth",
    "configuration": "config",
}

# Path fragments that add weight to a commit type during auto-detection
TYPE_PATTERN_SCORES: List[Tuple[str, CommitType, int]] = [
    ("perf", CommitType.PERF, 10),
    ("performance", CommitType.PERF, 10),
    ("fix", CommitType.FIX, 15),
    ("bug", CommitType.FIX, 15),
    ("refactor", CommitType.REFACTOR, 10),
    ("rename", CommitType.REFACTOR, 10),
]


class MessageGenerator(ABC):
    """Interface for anything that can turn changes into a commit message."""

    @abstractmethod
    def generate(
        self,
        changes: List[FileChange],
        context: Optional[ProjectContext] = None
    ) -> ConventionalMessage:
        """
        Generate a commit message.

        Args:
            changes: Changes that make up the commit
            context: Optional project information

        Returns:
            Generated message

        Raises:
            MessageGenerationError: If no message can be produced
        """
        pass

    def fallback(
        self,
        changes: List[FileChange],
        context: Optional[ProjectContext] = None
    ) -> ConventionalMessage:
        """Message to use when ``generate`` fails."""
        return HeuristicMessageGenerator().generate(changes, context)


class HeuristicMessageGenerator(MessageGenerator):
    """Generates commit messages from path and change-type heuristics."""

    def __init__(self, config: Optional[MessageGeneratorConfig] = None):
        config = config or MessageGeneratorConfig()
        if config.max_length <= 0:
            config = replace(config, max_length=MessageGeneratorConfig.max_length)
        self.config = config

    def generate(
        self,
        changes: List[FileChange],
        context: Optional[ProjectContext] = None
    ) -> ConventionalMessage:
        if not changes:
            raise MessageGenerationError("No changes provided")

        summary = ChangeSummary.from_changes(changes)
        context = context or ProjectContext()

        if self.config.style == MessageStyle.TRADITIONAL:
            return self._traditional(summary)
        if self.config.style == MessageStyle.CUSTOM:
            return self._custom(summary, context)
        return self._conventional(summary, context)

    def fallback(
        self,
        changes: List[FileChange],
        context: Optional[ProjectContext] = None
    ) -> ConventionalMessage:
        return self._conventional(ChangeSummary.from_changes(changes), context or ProjectContext())

    # Conventional style

    def _conventional(self, summary: ChangeSummary, context: ProjectContext) -> ConventionalMessage:
        commit_type = self.determine_commit_type(summary)
        scope = self.determine_scope(summary)
        breaking = is_breaking_change(summary.changes)
        subject = truncate_subject(self._subject(summary, commit_type), self.config.max_length)

        message = format_conventional_message(
            commit_type=commit_type,
            subject=subject,
            scope=scope,
            body=self._body(summary),
            footer=self._footer(breaking, context),
            breaking=breaking,
        )

        if self.config.include_co_authors and context.co_authors:
            message.co_authors = list(context.co_authors)
            message.full = message.format()

        return message

    def determine_commit_type(self, summary: ChangeSummary) -> CommitType:
        """
        Pick the commit type for a set of changes.

        Args:
            summary: Summarised changes

        Returns:
            CommitType, CHORE when nothing more specific applies
        """
        if self.config.auto_detect_type:
            return self._auto_detect_type(summary)

        if summary.fixes:
            return CommitType.FIX
        if summary.added:
            return CommitType.FEAT
        paths = [c.path for c in summary.changes]
        if any(is_test_file(p) for p in paths):
            return CommitType.TEST
        if any(is_doc_file(p) for p in paths):
            return CommitType.DOCS
        return CommitType.CHORE

    def _auto_detect_type(self, summary: ChangeSummary) -> CommitType:
        scores: Dict[CommitType, int] = {t: 0 for t in CommitType}
        if summary.fixes:
            scores[CommitType.FIX] += 20
        if summary.added:
            scores[CommitType.FEAT] += 15

        for change in summary.changes:
            path = change.path.lower()
            if is_test_file(path):
                scores[CommitType.TEST] += 10
            elif is_doc_file(path):
                scores[CommitType.DOCS] += 10
            elif is_config_file(path):
                scores[CommitType.CHORE] += 8
            elif is_build_file(path):
                scores[CommitType.BUILD] += 10
            elif is_style_file(path):
                scores[CommitType.STYLE] += 8

            for fragment, commit_type, points in TYPE_PATTERN_SCORES:
                if fragment in path:
                    scores[commit_type] += points

            if change.change_type == ChangeType.ADD:
                scores[CommitType.FEAT] += 12

        # First type in declaration order wins ties
        best_type, best_score = CommitType.CHORE, 0
        for commit_type, score in scores.items():
            if score > best_score:
                best_type, best_score = commit_type, score
        return best_type

    def determine_scope(self, summary: ChangeSummary) -> str:
        """Pick a scope from configuration or the changed paths."""
        if self.config.auto_detect_scope:
            return self._auto_detect_scope(summary)

        if self.config.required_scopes:
            for scope in self.config.required_scopes:
                if any(scope in c.path for c in summary.changes):
                    return scope
            return self.config.required_scopes[0]

        return ""

    def _auto_detect_scope(self, summary: ChangeSummary) -> str:
        counts: Counter = Counter()
        for change in summary.changes:
            parts = change.path.split("/")
            if len(parts) > 1 and parts[0] not in (".", ".."):
                counts[SCOPE_NORMALIZATION.get(parts[0], parts[0])] += 1

            lower = change.path.lower()
            for fragment, scope in SCOPE_PATTERNS:
                if fragment in lower:
                    counts[scope] += 1

        if not counts:
            return ""
        # most_common keeps first-seen order for equal counts
        return counts.most_common(1)[0][0]

    def _subject(self, summary: ChangeSummary, commit_type: CommitType) -> str:
        changes = summary.changes
        single_name = posixpath.basename(changes[0].path) if len(changes) == 1 else None

        if commit_type == CommitType.FEAT:
            if summary.features:
                return f"add {summary.features[0]}"
            if len(summary.added) > 1:
                return f"add {len(summary.added)} new files"
            return "add new functionality"
        if commit_type == CommitType.FIX:
            if summary.fixes:
                return f"fix {summary.fixes[0]}"
            if single_name:
                return f"fix issue in {single_name}"
            return "fix bugs and issues"
        if commit_type == CommitType.DOCS:
            return f"update {single_name}" if single_name else "update documentation"
        if commit_type == CommitType.TEST:
            return "add tests" if summary.added else "update tests"
        if commit_type == CommitType.REFACTOR:
            return f"refactor {single_name}" if single_name else "refactor code"
        if commit_type == CommitType.STYLE:
            return "improve code style"
        if commit_type == CommitType.PERF:
            return "improve performance"
        if commit_type == CommitType.BUILD:
            return "update build configuration"
        if commit_type == CommitType.CI:
            return "update CI configuration"

        if single_name:
            return f"update {single_name}"
        return f"update {len(changes)} files"

    def _body(self, summary: ChangeSummary) -> str:
        lines = []
        if summary.added:
            lines.append(f"Added: {', '.join(_limit_files(summary.added))}")
        if summary.modified:
            lines.append(f"Modified: {', '.join(_limit_files(summary.modified))}")
        if summary.deleted:
            lines.append(f"Deleted: {', '.join(_limit_files(summary.deleted))}")
        if summary.total_additions or summary.total_deletions:
            lines.append(f"Changes: +{summary.total_additions} -{summary.total_deletions}")
        return "\n".join(lines)

    def _footer(self, breaking: bool, context: ProjectContext) -> str:
        lines = []
        if breaking:
            lines.append(f"{BREAKING_CHANGE_MARKER} This commit contains breaking changes")
        if self.config.include_references and context.issue_number:
            lines.append(f"Closes #{context.issue_number}")
        return "\n".join(lines)

    # Traditional style

    def _traditional(self, summary: ChangeSummary) -> ConventionalMessage:
        subject = truncate_subject(self._traditional_subject(summary), self.config.max_length)
        body = self._traditional_body(summary)
        full = f"{subject}\n\n{body}" if body else subject
        return ConventionalMessage(subject=subject, body=body, full=full)

    def _traditional_subject(self, summary: ChangeSummary) -> str:
        changes = summary.changes
        if len(changes) == 1:
            change = changes[0]
            name = posixpath.basename(change.path)
            verbs = {
                ChangeType.ADD: "Add",
                ChangeType.DELETE: "Remove",
                ChangeType.MODIFY: "Update",
                ChangeType.RENAME: "Rename",
            }
            return f"{verbs.get(change.change_type, 'Change')} {name}"

        added, modified, deleted = len(summary.added), len(summary.modified), len(summary.deleted)
        if added and not modified and not deleted:
            return f"Add {added} files"
        if deleted and not added and not modified:
            return f"Remove {deleted} files"
        return f"Update {len(changes)} files"

    def _traditional_body(self, summary: ChangeSummary) -> str:
        if len(summary.changes) > 5:
            return ""
        markers = {
            ChangeType.ADD: "+",
            ChangeType.DELETE: "-",
            ChangeType.RENAME: "R",
        }
        return "\n".join(f"{markers.get(c.change_type, 'M')} {c.path}" for c in summary.changes)

    # Custom template style

    def _custom(self, summary: ChangeSummary, context: ProjectContext) -> ConventionalMessage:
        if not self.config.template:
            return self._conventional(summary, context)

        commit_type = self.determine_commit_type(summary)
        variables = {
            "type": commit_type.value,
            "scope": self.determine_scope(summary),
            "subject": self._subject(summary, commit_type),
            "files": ", ".join(_limit_files([c.path for c in summary.changes])),
            "file_count": str(len(summary.changes)),
            "additions": str(summary.total_additions),
            "deletions": str(summary.total_deletions),
            "branch": context.branch_name or "",
            "issue": context.issue_number or "",
            "language": context.main_language or "",
        }

        try:
            rendered = Template(self.config.template).substitute(variables).strip()
        except (KeyError, ValueError) as e:
            raise MessageGenerationError(f"Template rendering failed: {e}") from e

        if not rendered:
            raise MessageGenerationError("Template rendered an empty message")

        parsed = parse_conventional_message(rendered)
        if parsed:
            return parsed

        lines = rendered.split("\n")
        body = "\n".join(lines[1:]).strip()
        return ConventionalMessage(subject=lines[0].strip(), body=body, full=rendered)
