"""
Conventional Commits message model for commitplan.

Holds the commit type vocabulary and the message object exchanged between
the message generator, the commit assembler and the validator.

Standard format: type(scope)!: subject

where:
- type: The kind of change (feat, fix, docs, etc.)
- scope: Optional context (module/component affected)
- subject: Brief summary in imperative mood
"""

import re
from enum import Enum
from typing import Optional, List
from dataclasses import dataclass, field


class CommitType(Enum):
    """Standard conventional commit types."""

    FEAT = "feat"        # New feature
    FIX = "fix"          # Bug fix
    DOCS = "docs"        # Documentation only changes
    STYLE = "style"      # Code style/formatting (no logic change)
    REFACTOR = "refactor"  # Code restructuring (no behavior change)
    PERF = "perf"        # Performance improvements
    TEST = "test"        # Adding or updating tests
    BUILD = "build"      # Build system or external dependencies
    CI = "ci"            # CI/CD configuration changes
    CHORE = "chore"      # Maintenance tasks
    REVERT = "revert"    # Reverting previous commits

    @property
    def description(self) -> str:
        """Get human-readable description of commit type."""
        descriptions = {
            CommitType.FEAT: "A new feature",
            CommitType.FIX: "A bug fix",
            CommitType.DOCS: "Documentation only changes",
            CommitType.STYLE: "Changes that don't affect code meaning (formatting, etc.)",
            CommitType.REFACTOR: "Code change that neither fixes a bug nor adds a feature",
            CommitType.PERF: "A code change that improves performance",
            CommitType.TEST: "Adding missing tests or correcting existing tests",
            CommitType.BUILD: "Changes that affect the build system or dependencies",
            CommitType.CI: "Changes to CI/CD configuration files and scripts",
            CommitType.CHORE: "Changes to build process or auxiliary tools",
            CommitType.REVERT: "Reverts a previous commit"
        }
        return descriptions[self]


ALL_COMMIT_TYPES = [t.value for t in CommitType]

BREAKING_CHANGE_MARKER = "BREAKING CHANGE:"

HEADER_PATTERN = re.compile(r"^(\w+)(?:\(([^)]+)\))?(!)?:\s*(.+)$")

# Trailer lines that open the footer section
FOOTER_PATTERN = re.compile(r"^(BREAKING CHANGE|[A-Za-z-]+):\s|^[A-Za-z-]+ #\d+")

# Footer lines unambiguous enough to form a footer with no body before them
STRICT_FOOTER_PATTERN = re.compile(r"^BREAKING CHANGE:\s|^[A-Za-z]+-[A-Za-z-]+:\s|^[A-Za-z-]+ #\d+")


@dataclass
class ConventionalMessage:
    """
    A generated or parsed commit message.

    ``type`` is kept as a plain string so that messages from other styles
    (traditional, custom templates) can carry an empty or unknown type
    and still be validated.
    """

    subject: str
    type: str = ""
    scope: str = ""
    body: str = ""
    footer: str = ""
    breaking: bool = False
    co_authors: List[str] = field(default_factory=list)
    full: str = ""

    def __post_init__(self):
        if not self.full:
            self.full = self.format()

    @property
    def header(self) -> str:
        """First line of the message."""
        return self.full.split("\n", 1)[0]

    def format(self) -> str:
        """Format as a commit message string."""
        if self.type:
            header = self.type
            if self.scope:
                header += f"({self.scope})"
            if self.breaking:
                header += "!"
            header += f": {self.subject}"
        else:
            header = self.subject

        parts = [header]
        if self.body:
            parts.append("")
            parts.append(self.body)

        footer_lines = [self.footer] if self.footer else []
        footer_lines.extend(f"Co-authored-by: {author}" for author in self.co_authors)
        if footer_lines:
            parts.append("")
            parts.append("\n".join(footer_lines))

        return "\n".join(parts)


def format_conventional_message(
    commit_type: CommitType,
    subject: str,
    scope: Optional[str] = None,
    body: Optional[str] = None,
    footer: Optional[str] = None,
    breaking: bool = False
) -> ConventionalMessage:
    """
    Build a conventional commit message.

    Args:
        commit_type: Type of commit
        subject: Brief description in imperative mood
        scope: Optional scope
        body: Optional detailed body
        footer: Optional footer (e.g., BREAKING CHANGE, issue refs)
        breaking: Whether this is a breaking change

    Returns:
        ConventionalMessage with ``full`` rendered
    """
    return ConventionalMessage(
        type=commit_type.value,
        scope=scope or "",
        subject=subject,
        body=body or "",
        footer=footer or "",
        breaking=breaking,
    )


def parse_conventional_message(message: str) -> Optional[ConventionalMessage]:
    """
    Parse a conventional commit message.

    The type is not checked against the known vocabulary here; that is
    the validator's job.

    Args:
        message: Full commit message

    Returns:
        ConventionalMessage or None if the header is not in
        ``type(scope)!: subject`` form
    """
    text = message.strip()
    lines = text.split("\n")
    header = lines[0].strip()

    match = HEADER_PATTERN.match(header)
    if not match:
        return None

    type_str, scope, breaking_marker, subject = match.groups()

    body = ""
    footer = ""
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", "\n".join(lines[1:])) if p.strip()]
    if paragraphs:
        # Only the last paragraph can be the footer
        last = paragraphs[-1]
        pattern = FOOTER_PATTERN if len(paragraphs) > 1 else STRICT_FOOTER_PATTERN
        if pattern.match(last):
            footer = last
            paragraphs = paragraphs[:-1]
        body = "\n\n".join(paragraphs)

    breaking = breaking_marker == "!" or BREAKING_CHANGE_MARKER in footer

    return ConventionalMessage(
        type=type_str,
        scope=scope or "",
        subject=subject.strip(),
        body=body,
        footer=footer,
        breaking=breaking,
        full=text,
    )
