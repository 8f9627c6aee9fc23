"""
Path heuristics for classifying file changes.

All functions are pure and look only at the path and the change type;
file contents are never inspected. Matching is case-insensitive.
"""

import posixpath
from typing import List, Tuple, Sequence

from .models import ChangeType, FileChange, GroupType


DOC_EXTENSIONS = (".md", ".rst", ".txt")
DOC_MARKERS = ("readme", "doc", "manual")

CONFIG_EXTENSIONS = (".json", ".yaml", ".yml", ".toml", ".ini", ".conf", ".config")
CONFIG_MARKERS = ("config", ".env", "dockerfile", "makefile")

BUILD_MARKERS = ("makefile", "build", "webpack", "package.json", "go.mod", "cargo.toml")
STYLE_EXTENSIONS = (".css", ".scss", ".sass", ".less")

FIX_MARKERS = ("fix", "bug")

# Ordered (keywords, feature) table; the first matching row wins
FEATURE_KEYWORDS: List[Tuple[Tuple[str, ...], str]] = [
    (("auth",), "authentication"),
    (("user",), "user_management"),
    (("api",), "api"),
    (("ui", "view"), "ui"),
    (("db", "database"), "database"),
    (("config",), "configuration"),
]

# Changes larger than this many lines are treated as potentially breaking
LARGE_CHANGE_LINES = 100


def is_test_file(path: str) -> bool:
    """Check if a path looks like a test file."""
    lower = path.lower()
    return "test" in lower or "spec" in lower


def is_doc_file(path: str) -> bool:
    """Check if a path looks like documentation."""
    lower = path.lower()
    return lower.endswith(DOC_EXTENSIONS) or any(m in lower for m in DOC_MARKERS)


def is_config_file(path: str) -> bool:
    """Check if a path looks like configuration."""
    lower = path.lower()
    return lower.endswith(CONFIG_EXTENSIONS) or any(m in lower for m in CONFIG_MARKERS)


def is_build_file(path: str) -> bool:
    lower = path.lower()
    return any(m in lower for m in BUILD_MARKERS)


def is_style_file(path: str) -> bool:
    return path.lower().endswith(STYLE_EXTENSIONS)


def is_fix_path(path: str) -> bool:
    """Check if a path hints at a bug fix."""
    lower = path.lower()
    return any(m in lower for m in FIX_MARKERS)


def extract_module(path: str) -> str:
    """
    Get the module key of a path.

    Args:
        path: Repository-relative file path

    Returns:
        First path segment, or "root" for top-level files
    """
    parts = path.split("/")
    if len(parts) > 1:
        return parts[0]
    return "root"


def detect_feature(path: str) -> str:
    """
    Get the feature key of a path.

    Keywords are checked in table order, so a path containing both
    "auth" and "api" maps to "authentication".

    Args:
        path: Repository-relative file path

    Returns:
        Feature name, the directory with "/" replaced by "_", or "core"
    """
    lower = path.lower()
    for keywords, feature in FEATURE_KEYWORDS:
        if any(k in lower for k in keywords):
            return feature

    directory = posixpath.dirname(path)
    if directory and directory != ".":
        return directory.replace("/", "_")

    return "core"


def extension_of(path: str) -> str:
    """Lowercase extension including the dot, or "" when there is none."""
    return posixpath.splitext(path)[1].lower()


def directory_of(path: str) -> str:
    """Directory of a path, "." for top-level files."""
    return posixpath.dirname(path) or "."


def classify_change(change: FileChange) -> GroupType:
    """
    Assign a semantic tag to a single change.

    Checked in order: test, doc, config, added file (feature), fix hint.
    """
    path = change.path
    if is_test_file(path):
        return GroupType.TEST
    if is_doc_file(path):
        return GroupType.DOCS
    if is_config_file(path):
        return GroupType.CONFIG
    if change.change_type == ChangeType.ADD:
        return GroupType.FEATURE
    if is_fix_path(path):
        return GroupType.FIX
    return GroupType.MIXED


def determine_group_type(changes: Sequence[FileChange]) -> GroupType:
    """
    Determine the dominant semantic type of a set of changes.

    Tests, docs and config win only with a strict majority. Otherwise a
    single fix or feature indicator is enough, fixes first.

    Args:
        changes: Changes in the group

    Returns:
        GroupType for the whole set
    """
    if not changes:
        return GroupType.MIXED

    counts = {tag: 0 for tag in GroupType}
    for change in changes:
        counts[classify_change(change)] += 1

    half = len(changes) // 2
    if counts[GroupType.TEST] > half:
        return GroupType.TEST
    if counts[GroupType.DOCS] > half:
        return GroupType.DOCS
    if counts[GroupType.CONFIG] > half:
        return GroupType.CONFIG
    if counts[GroupType.FIX] > 0:
        return GroupType.FIX
    if counts[GroupType.FEATURE] > 0:
        return GroupType.FEATURE
    return GroupType.MIXED


def is_breaking_change(changes: Sequence[FileChange]) -> bool:
    """
    Check whether a set of changes is potentially breaking.

    Deletions, anything touching an API path and very large diffs count.
    """
    for change in changes:
        if change.change_type == ChangeType.DELETE:
            return True
        if "api" in change.path.lower():
            return True
        if change.total_lines > LARGE_CHANGE_LINES:
            return True
    return False
