"""
Validation of planned commits and commit plans.

Checks messages against conventional commit rules, commits against size
and file-mix rules, runs user-supplied regex rules, and checks the plan
for dependency cycles and questionable ordering. Findings are scored:
1.0 minus a penalty per error (by severity) and 0.05 per warning.

Validation never raises; every problem becomes a finding.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Dict, Optional, Set, Tuple, Pattern

from .classifier import is_config_file, is_doc_file, is_test_file
from .conventional import (
    ALL_COMMIT_TYPES,
    BREAKING_CHANGE_MARKER,
    CommitType,
    ConventionalMessage,
    parse_conventional_message,
)
from .models import CommitPlan, ErrorSeverity, PlannedCommit, ValidationResult

logger = logging.getLogger(__name__)


SCOPE_FORMAT = re.compile(r"^[a-z][a-z0-9-]*$")
BREAKING_HEADER = re.compile(r"^\w+(?:\([^)]*\))?!:")

# Past/continuous tense starts that should be imperative
NON_IMPERATIVE_WORDS = {
    "added", "adding", "adds",
    "fixed", "fixing", "fixes",
    "updated", "updating", "updates",
    "changed", "changing", "changes",
    "removed", "removing", "removes",
}

GENERIC_SUBJECTS = {
    "fix", "update", "change", "modify", "wip", "work in progress",
    "tmp", "temp", "temporary", "test", "debug", "refactor",
}

COMMON_TYPOS = {
    "teh": "the",
    "adn": "and",
    "nad": "and",
    "udpate": "update",
    "upate": "update",
    "chnage": "change",
    "chagne": "change",
}


class ValidationScope(Enum):
    """Part of a commit a custom rule is matched against."""

    SUBJECT = "subject"
    BODY = "body"
    FOOTER = "footer"
    FULL = "full"
    FILES = "files"


@dataclass(frozen=True)
class ValidationRule:
    """A user-supplied regex rule; a match produces an error."""

    id: str
    pattern: str
    message: str
    severity: ErrorSeverity = ErrorSeverity.WARNING
    scope: ValidationScope = ValidationScope.FULL


@dataclass(frozen=True)
class ValidatorConfig:
    """Configuration for CommitValidator."""

    conventional_commits: bool = True
    max_message_length: int = 72
    max_subject_length: int = 50
    max_body_line_length: int = 72
    required_scopes: Tuple[str, ...] = ()
    allowed_types: Tuple[str, ...] = ()
    allow_breaking: bool = True
    require_body: bool = False
    require_footer: bool = False
    custom_rules: Tuple[ValidationRule, ...] = ()
    enforce_capitalization: bool = False
    allow_empty_scope: bool = False
    max_commit_size: int = 100
    validate_file_patterns: bool = True

    def with_defaults(self) -> "ValidatorConfig":
        """Return a copy with unset (non-positive) limits and empty types replaced by defaults."""
        defaults = ValidatorConfig()

        def positive(value: int, default: int) -> int:
            return value if value > 0 else default

        return replace(
            self,
            max_message_length=positive(self.max_message_length, defaults.max_message_length),
            max_subject_length=positive(self.max_subject_length, defaults.max_subject_length),
            max_body_line_length=positive(self.max_body_line_length, defaults.max_body_line_length),
            max_commit_size=positive(self.max_commit_size, defaults.max_commit_size),
            allowed_types=tuple(self.allowed_types) or tuple(ALL_COMMIT_TYPES),
            required_scopes=tuple(self.required_scopes),
            custom_rules=tuple(self.custom_rules),
        )


def has_cyclic_dependency(
    commit_id: str,
    dependencies: Dict[str, List[str]],
    visited: Optional[Set[str]] = None,
    in_progress: Optional[Set[str]] = None
) -> bool:
    """
    Check whether a cycle is reachable from ``commit_id``.

    Iterative depth-first search; a dependency that is still on the
    current path closes a cycle.

    Args:
        commit_id: Node to start from
        dependencies: Map of commit id to the ids it depends on
        visited: Nodes already fully explored (shared across calls to
            scan a whole plan once)
        in_progress: Nodes on the current search path

    Returns:
        True if a cycle was found
    """
    visited = set() if visited is None else visited
    in_progress = set() if in_progress is None else in_progress

    if commit_id in visited:
        return False

    visited.add(commit_id)
    in_progress.add(commit_id)
    stack = [(commit_id, iter(dependencies.get(commit_id, [])))]

    while stack:
        node, neighbours = stack[-1]
        advanced = False
        for dep in neighbours:
            if dep in in_progress:
                return True
            if dep not in visited:
                visited.add(dep)
                in_progress.add(dep)
                stack.append((dep, iter(dependencies.get(dep, []))))
                advanced = True
                break
        if not advanced:
            in_progress.discard(node)
            stack.pop()

    return False


class CommitValidator:
    """
    Validates messages, commits and plans.

    Example:
        >>> validator = CommitValidator(ValidatorConfig(max_subject_length=60))
        >>> result = validator.validate_plan(plan)
        >>> print(result.format_report())
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = (config or ValidatorConfig()).with_defaults()
        self.rules: List[Tuple[ValidationRule, Pattern]] = self._compile_rules(self.config.custom_rules)

    @staticmethod
    def _compile_rules(rules) -> List[Tuple[ValidationRule, Pattern]]:
        compiled = []
        for rule in rules:
            try:
                compiled.append((rule, re.compile(rule.pattern)))
            except re.error as e:
                logger.warning(f"Skipping custom rule '{rule.id}': invalid pattern {rule.pattern!r}: {e}")
        return compiled

    # Plan

    def validate_plan(self, plan: CommitPlan) -> ValidationResult:
        """
        Validate every commit and the plan as a whole.

        Args:
            plan: Plan to validate

        Returns:
            Combined result with score
        """
        result = ValidationResult()

        for commit in plan.commits:
            result.merge(self._check_commit(commit))

        self._check_dependencies(plan, result)
        self._check_ordering(plan, result)

        result.calculate_score()
        logger.info(
            f"Validated plan: valid={result.valid}, score={result.score:.2f}, "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    def _check_dependencies(self, plan: CommitPlan, result: ValidationResult) -> None:
        visited: Set[str] = set()
        in_progress: Set[str] = set()
        for commit in plan.commits:
            if has_cyclic_dependency(commit.id, plan.dependencies, visited, in_progress):
                result.add_error(
                    "cyclic-dependency",
                    f"Cyclic dependency detected involving commit {commit.id}",
                )
                in_progress.clear()

    def _check_ordering(self, plan: CommitPlan, result: ValidationResult) -> None:
        commits = plan.commits
        for i, commit in enumerate(commits):
            if commit.breaking and i < len(commits) - 1:
                result.add_warning(
                    "breaking-change-ordering",
                    f"Breaking commit {commit.id} is not the last commit",
                    "Move breaking changes to the end of the plan",
                )
                break

        if commits and commits[0].type == CommitType.TEST:
            result.add_warning(
                "test-before-code",
                "First commit only contains tests",
                "Commit code changes before their tests",
            )

    # Commit

    def validate_commit(self, commit: PlannedCommit) -> ValidationResult:
        """Validate a single commit: message, size, file mix and custom rules."""
        result = self._check_commit(commit)
        result.calculate_score()
        return result

    def _check_commit(self, commit: PlannedCommit) -> ValidationResult:
        result = ValidationResult()
        self._check_message(commit.message, result)
        self._check_size(commit, result)
        if self.config.validate_file_patterns:
            self._check_file_patterns(commit, result)
        self._check_custom_rules(commit.message, commit.files, result)
        return result

    def _check_size(self, commit: PlannedCommit, result: ValidationResult) -> None:
        file_count = len(commit.files)
        limit = self.config.max_commit_size
        if file_count > limit:
            result.add_error(
                "commit-too-large",
                f"Commit {commit.id} changes {file_count} files (limit {limit})",
                ErrorSeverity.WARNING,
            )
        if file_count > 2 * limit:
            result.add_error(
                "commit-extremely-large",
                f"Commit {commit.id} changes {file_count} files (more than twice the limit)",
                ErrorSeverity.ERROR,
            )

        change_types = {c.change_type for c in commit.changes}
        if len(change_types) > 1:
            result.add_warning(
                "mixed-change-types",
                f"Commit {commit.id} mixes {len(change_types)} change types",
                "Consider splitting additions, modifications and deletions",
            )

    def _check_file_patterns(self, commit: PlannedCommit, result: ValidationResult) -> None:
        tests = [f for f in commit.files if is_test_file(f)]
        configs = [f for f in commit.files if is_config_file(f) and not is_test_file(f)]
        code = [
            f for f in commit.files
            if not is_test_file(f) and not is_doc_file(f) and not is_config_file(f)
        ]

        if tests and len(tests) < len(commit.files):
            result.add_warning(
                "mixed-test-prod",
                f"Commit {commit.id} mixes test and production files",
                "Commit tests separately from the code they cover",
            )
        if configs and code:
            result.add_warning(
                "mixed-config-code",
                f"Commit {commit.id} mixes configuration and code",
                "Commit configuration changes separately",
            )

    def _check_custom_rules(
        self,
        message: ConventionalMessage,
        files: List[str],
        result: ValidationResult
    ) -> None:
        for rule, pattern in self.rules:
            if pattern.search(self._rule_target(rule.scope, message, files)):
                result.add_error(rule.id, rule.message, rule.severity)

    @staticmethod
    def _rule_target(scope: ValidationScope, message: ConventionalMessage, files: List[str]) -> str:
        if scope == ValidationScope.SUBJECT:
            return message.subject
        if scope == ValidationScope.BODY:
            return message.body
        if scope == ValidationScope.FOOTER:
            return message.footer
        if scope == ValidationScope.FILES:
            return "\n".join(files)
        return message.full

    # Message

    def validate_message(self, message: ConventionalMessage) -> ValidationResult:
        """Validate a message on its own, including custom rules on message scopes."""
        result = ValidationResult()
        self._check_message(message, result)
        self._check_custom_rules(message, [], result)
        result.calculate_score()
        return result

    def validate_message_text(self, text: str) -> ValidationResult:
        """
        Parse and validate a raw commit message.

        Args:
            text: Full commit message

        Returns:
            Validation result; unparseable conventional messages fail
            with an ``invalid-format`` error
        """
        if self.config.conventional_commits:
            message = parse_conventional_message(text)
            if message is None:
                result = ValidationResult()
                result.add_error(
                    "invalid-format",
                    "Message header does not match 'type(scope): subject'",
                    line=1,
                )
                result.calculate_score()
                return result
        else:
            lines = text.strip().split("\n")
            message = ConventionalMessage(
                subject=lines[0].strip(),
                body="\n".join(lines[2:]).strip(),
                full=text.strip(),
            )
        return self.validate_message(message)

    def _check_message(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if self.config.conventional_commits:
            self._check_type(message, result)
            self._check_scope(message, result)
            if self._check_subject_present(message, result):
                self._check_subject(message.subject, result)
            self._check_body(message, result)
            self._check_footer(message, result)
            self._check_breaking(message, result)
        elif self._check_subject_present(message, result):
            self._check_subject(message.subject, result)

        self._check_length(message, result)
        self._check_content(message, result)

    def _check_type(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if not message.type:
            result.add_error("missing-type", "Commit type is required", line=1)
        elif message.type not in self.config.allowed_types:
            result.add_error(
                "invalid-type",
                f"Invalid commit type '{message.type}'. Allowed: {', '.join(self.config.allowed_types)}",
                line=1,
            )

    def _check_scope(self, message: ConventionalMessage, result: ValidationResult) -> None:
        scopes = self.config.required_scopes
        if scopes:
            if not message.scope:
                if not self.config.allow_empty_scope:
                    result.add_error(
                        "missing-scope",
                        f"Scope is required. Allowed: {', '.join(scopes)}",
                        line=1,
                    )
            elif message.scope not in scopes:
                result.add_error(
                    "invalid-scope",
                    f"Invalid scope '{message.scope}'. Allowed: {', '.join(scopes)}",
                    line=1,
                )

        if message.scope and not SCOPE_FORMAT.match(message.scope):
            result.add_error(
                "invalid-scope-format",
                f"Scope '{message.scope}' should be lowercase letters, digits and hyphens",
                ErrorSeverity.WARNING,
                line=1,
            )

    def _check_subject_present(self, message: ConventionalMessage, result: ValidationResult) -> bool:
        if not message.subject.strip():
            result.add_error("empty-subject", "Subject is required", line=1)
            return False
        return True

    def _check_subject(self, subject: str, result: ValidationResult) -> None:
        if len(subject) > self.config.max_subject_length:
            result.add_error(
                "subject-too-long",
                f"Subject is {len(subject)} characters (max {self.config.max_subject_length})",
                line=1,
            )

        if self.config.enforce_capitalization and not subject[0].isupper():
            result.add_warning(
                "subject-capitalization",
                "Subject should start with a capital letter",
                f"Use '{subject[0].upper()}{subject[1:]}'",
            )

        if subject.endswith("."):
            result.add_warning(
                "subject-period",
                "Subject should not end with a period",
                "Remove the trailing period",
            )

        first_word = subject.split()[0].lower()
        if first_word in NON_IMPERATIVE_WORDS:
            result.add_warning(
                "non-imperative",
                f"Subject should use imperative mood, not '{first_word}'",
                "Write the subject as a command, e.g. 'add' instead of 'added'",
            )

    def _check_body(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if not message.body:
            if self.config.require_body:
                result.add_error("missing-body", "Commit body is required")
            return

        limit = self.config.max_body_line_length
        for number, line in enumerate(message.body.split("\n"), start=1):
            if len(line) > limit:
                result.add_warning(
                    "body-line-too-long",
                    f"Body line {number} is {len(line)} characters (max {limit})",
                    "Wrap body lines",
                )

        lines = message.full.split("\n")
        if len(lines) > 1 and lines[1].strip() != "":
            result.add_error(
                "missing-blank-line",
                "Subject and body must be separated by a blank line",
                line=2,
            )

    def _check_footer(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if not message.footer:
            if self.config.require_footer:
                result.add_error("missing-footer", "Commit footer is required")
            return

        for line in message.footer.split("\n"):
            if line.strip() and ":" not in line and "#" not in line:
                result.add_warning(
                    "invalid-footer-format",
                    f"Footer line '{line}' is not a 'Token: value' trailer",
                    "Use 'Token: value' or 'Token #ref' in the footer",
                )

    def _check_breaking(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if not message.breaking:
            return

        if not self.config.allow_breaking:
            result.add_error(
                "breaking-not-allowed",
                "Breaking changes are not allowed",
                ErrorSeverity.CRITICAL,
            )
            return

        documented = BREAKING_CHANGE_MARKER in message.footer or BREAKING_HEADER.match(message.header)
        if not documented:
            result.add_warning(
                "breaking-change-documentation",
                "Breaking change is not documented",
                f"Add a '{BREAKING_CHANGE_MARKER}' footer or '!' after the type",
            )

    def _check_length(self, message: ConventionalMessage, result: ValidationResult) -> None:
        if len(message.full) > self.config.max_message_length:
            result.add_warning(
                "message-too-long",
                f"Message is {len(message.full)} characters (max {self.config.max_message_length})",
                "Shorten the message",
            )

    def _check_content(self, message: ConventionalMessage, result: ValidationResult) -> None:
        subject = message.subject.strip().lower()
        if subject in GENERIC_SUBJECTS:
            result.add_warning(
                "generic-subject",
                f"Subject '{message.subject}' is too generic",
                "Describe what changed and why",
            )

        words = set(re.findall(r"[a-z]+", message.full.lower()))
        for typo in sorted(COMMON_TYPOS):
            if typo in words:
                result.add_warning(
                    "possible-typo",
                    f"Possible typo '{typo}'",
                    f"Did you mean '{COMMON_TYPOS[typo]}'?",
                )
