"""
Parsers for git working-tree output.

- ``git status --porcelain``: one change per line, ``XY PATH`` or
  ``XY OLD -> NEW`` for renames and copies
- ``git diff --numstat``: ``ADDED<TAB>DELETED<TAB>PATH``, with ``-``
  counts for binary files and ``OLD => NEW`` or ``dir/{OLD => NEW}``
  paths for renames
"""

import logging
from dataclasses import replace
from typing import List, Dict, NamedTuple

from ..commit.models import ChangeType, FileChange

logger = logging.getLogger(__name__)


class StatusParseError(Exception):
    """Raised when a status line cannot be parsed."""
    pass


class LineStats(NamedTuple):
    additions: int
    deletions: int
    binary: bool


# Status characters in precedence order; either column may carry them
STATUS_PRECEDENCE = [
    ("A", ChangeType.ADD),
    ("M", ChangeType.MODIFY),
    ("D", ChangeType.DELETE),
    ("R", ChangeType.RENAME),
    ("C", ChangeType.COPY),
    ("?", ChangeType.UNTRACKED),
]


def _unquote(path: str) -> str:
    """Strip the quoting git applies to paths with special characters."""
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return path


def change_type_from_status(status: str) -> ChangeType:
    """
    Map a two-character porcelain status to a ChangeType.

    Args:
        status: The ``XY`` status columns

    Returns:
        ChangeType, MODIFY when no known character is present
    """
    for char, change_type in STATUS_PRECEDENCE:
        if char in status:
            return change_type
    return ChangeType.MODIFY


def parse_status_line(line: str) -> FileChange:
    """
    Parse one line of ``git status --porcelain``.

    Args:
        line: Status line

    Returns:
        FileChange with zero line statistics

    Raises:
        StatusParseError: If the line is too short or has no path
    """
    if len(line) < 3:
        raise StatusParseError(f"Invalid status line: {line!r}")

    status = line[:2]
    path_part = line[3:].strip()
    if not path_part:
        raise StatusParseError(f"Status line has no path: {line!r}")

    change_type = change_type_from_status(status)

    old_path = None
    path = path_part
    if ("R" in status or "C" in status) and " -> " in path_part:
        old, new = path_part.split(" -> ", 1)
        old_path = _unquote(old.strip())
        path = new.strip()

    return FileChange(path=_unquote(path), change_type=change_type, old_path=old_path)


def parse_status_output(output: str) -> List[FileChange]:
    """
    Parse full ``git status --porcelain`` output.

    Lines that cannot be parsed are logged and skipped.

    Args:
        output: Command output

    Returns:
        Changes in output order
    """
    changes = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            changes.append(parse_status_line(line))
        except StatusParseError as e:
            logger.warning(f"Skipping status line: {e}")
    return changes


def _numstat_path(path: str) -> str:
    """
    Resolve the destination path of a numstat entry.

    Renames are printed as ``old => new`` or ``dir/{old => new}/file``.
    """
    path = _unquote(path)
    if " => " not in path:
        return path

    open_brace, close_brace = path.find("{"), path.find("}")
    if -1 < open_brace < close_brace:
        inner = path[open_brace + 1:close_brace]
        if " => " in inner:
            new = inner.split(" => ", 1)[1]
            resolved = path[:open_brace] + new + path[close_brace + 1:]
            return resolved.replace("//", "/").lstrip("/")

    return path.split(" => ", 1)[1]


def parse_numstat(output: str) -> Dict[str, LineStats]:
    """
    Parse ``git diff --numstat`` output.

    Args:
        output: Command output

    Returns:
        Mapping of path to line statistics
    """
    stats: Dict[str, LineStats] = {}
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) < 3:
            continue

        added, deleted, path = fields[0], fields[1], "\t".join(fields[2:])
        binary = added == "-" or deleted == "-"
        try:
            additions = 0 if added == "-" else int(added)
            deletions = 0 if deleted == "-" else int(deleted)
        except ValueError:
            logger.debug(f"Skipping numstat line: {line!r}")
            continue

        stats[_numstat_path(path)] = LineStats(additions, deletions, binary)
    return stats


def apply_numstat(changes: List[FileChange], stats: Dict[str, LineStats]) -> List[FileChange]:
    """
    Attach line statistics to changes.

    Untracked files are not part of the diff and keep zero counts.

    Returns:
        New list of changes
    """
    result = []
    for change in changes:
        line_stats = stats.get(change.path)
        if line_stats is None or change.change_type == ChangeType.UNTRACKED:
            result.append(change)
            continue
        result.append(replace(
            change,
            additions=line_stats.additions,
            deletions=line_stats.deletions,
            binary=line_stats.binary,
        ))
    return result
