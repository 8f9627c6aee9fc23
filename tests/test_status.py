import pytest

from commitplan.commit.models import ChangeType, FileChange
from commitplan.repository.status import (
    LineStats,
    StatusParseError,
    apply_numstat,
    change_type_from_status,
    parse_numstat,
    parse_status_line,
    parse_status_output,
)


@pytest.mark.parametrize("status,expected", [
    ("A ", ChangeType.ADD),
    (" M", ChangeType.MODIFY),
    ("MM", ChangeType.MODIFY),
    ("D ", ChangeType.DELETE),
    ("R ", ChangeType.RENAME),
    ("C ", ChangeType.COPY),
    ("??", ChangeType.UNTRACKED),
    ("AM", ChangeType.ADD),
    ("UU", ChangeType.MODIFY),
])
def test_change_type_from_status(status, expected):
    assert change_type_from_status(status) == expected


def test_parse_modified_line():
    change = parse_status_line(" M src/app.py")
    assert change == FileChange(path="src/app.py", change_type=ChangeType.MODIFY)


def test_parse_rename_line():
    change = parse_status_line("R  old/name.go -> new/name.go")
    assert change.change_type == ChangeType.RENAME
    assert change.path == "new/name.go"
    assert change.old_path == "old/name.go"


def test_parse_quoted_path():
    change = parse_status_line('?? "docs/my notes.md"')
    assert change.path == "docs/my notes.md"
    assert change.change_type == ChangeType.UNTRACKED


@pytest.mark.parametrize("line", ["M", "MM ", " M   "])
def test_parse_invalid_line(line):
    with pytest.raises(StatusParseError):
        parse_status_line(line)


def test_parse_output_skips_malformed_lines():
    output = " M main.go\nXY\n\n?? notes.txt\nA  pkg/new.go\n"
    changes = parse_status_output(output)

    assert [c.path for c in changes] == ["main.go", "notes.txt", "pkg/new.go"]
    assert [c.change_type for c in changes] == [ChangeType.MODIFY, ChangeType.UNTRACKED, ChangeType.ADD]


def test_parse_numstat():
    output = "10\t2\tmain.go\n-\t-\tassets/logo.png\n0\t5\tREADME.md\nbroken line\n"
    stats = parse_numstat(output)

    assert stats == {
        "main.go": LineStats(10, 2, False),
        "assets/logo.png": LineStats(0, 0, True),
        "README.md": LineStats(0, 5, False),
    }


def test_apply_numstat():
    changes = [
        FileChange("main.go"),
        FileChange("assets/logo.png"),
        FileChange("notes.txt", ChangeType.UNTRACKED),
        FileChange("missing.go"),
    ]
    stats = {
        "main.go": LineStats(10, 2, False),
        "assets/logo.png": LineStats(0, 0, True),
        "notes.txt": LineStats(3, 0, False),
    }

    result = apply_numstat(changes, stats)

    assert (result[0].additions, result[0].deletions) == (10, 2)
    assert result[1].binary
    assert result[2].additions == 0
    assert result[3] == changes[3]
    assert changes[0].additions == 0


@pytest.mark.parametrize("path,expected", [
    ("old.go => new.go", "new.go"),
    ("src/{core => lib}/parser.py", "src/lib/parser.py"),
    ("src/{ => lib}/parser.py", "src/lib/parser.py"),
    ("src/{lib => }/parser.py", "src/parser.py"),
    ("{docs => guide}/intro.md", "guide/intro.md"),
])
def test_parse_numstat_rename_paths(path, expected):
    assert parse_numstat(f"3\t1\t{path}\n") == {expected: LineStats(3, 1, False)}


def test_renamed_file_gets_line_stats():
    changes = parse_status_output("R  src/core/parser.py -> src/lib/parser.py\n")
    stats = parse_numstat("7\t2\tsrc/{core => lib}/parser.py\n")

    renamed = apply_numstat(changes, stats)[0]

    assert (renamed.additions, renamed.deletions) == (7, 2)
    assert renamed.old_path == "src/core/parser.py"
