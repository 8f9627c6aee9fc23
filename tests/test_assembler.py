import pytest

from commitplan.commit.assembler import (
    CommitAssembler,
    calculate_commit_size,
    calculate_priority,
    determine_commit_type,
    determine_scope,
)
from commitplan.commit.conventional import CommitType, ConventionalMessage
from commitplan.commit.grouping import build_group
from commitplan.commit.message_generator import MessageGenerationError, MessageGenerator
from commitplan.commit.models import ChangeType, CommitSize


class FailingGenerator(MessageGenerator):

    def generate(self, changes, context=None):
        raise MessageGenerationError("template exploded")

    def fallback(self, changes, context=None):
        return ConventionalMessage(type="chore", subject="fallback message")


class TestDetermineCommitType:

    def test_fix_wins(self, make_change):
        changes = [make_change("new.go", ChangeType.ADD), make_change("bugfix.go")]
        assert determine_commit_type(changes) == CommitType.FIX

    def test_feature(self, make_change):
        assert determine_commit_type([make_change("new.go", ChangeType.ADD)]) == CommitType.FEAT

    def test_tests_and_docs(self, make_change):
        assert determine_commit_type([make_change("main_test.go")]) == CommitType.TEST
        assert determine_commit_type([make_change("README.md")]) == CommitType.DOCS

    def test_added_test_file_is_test(self, make_change):
        assert determine_commit_type([make_change("new_test.go", ChangeType.ADD)]) == CommitType.TEST

    def test_config_and_plain_code_are_chores(self, make_change):
        assert determine_commit_type([make_change("settings.yaml")]) == CommitType.CHORE
        assert determine_commit_type([make_change("main.go")]) == CommitType.CHORE


def test_determine_scope(make_change):
    changes = [make_change("pkg/a.go"), make_change("cmd/b.go"), make_change("pkg/c.go"), make_change("root.go")]
    assert determine_scope(changes) == "pkg"
    assert determine_scope([make_change("main.go")]) == ""


@pytest.mark.parametrize("lines,expected", [
    (0, CommitSize.SMALL),
    (10, CommitSize.SMALL),
    (11, CommitSize.MEDIUM),
    (50, CommitSize.MEDIUM),
    (200, CommitSize.LARGE),
    (201, CommitSize.HUGE),
])
def test_calculate_commit_size(make_change, lines, expected):
    assert calculate_commit_size([make_change("a.go", additions=lines)]) == expected


def test_calculate_priority():
    assert calculate_priority(CommitType.FIX, CommitSize.SMALL, False) == 40
    assert calculate_priority(CommitType.FEAT, CommitSize.HUGE, False) == 20
    assert calculate_priority(CommitType.DOCS, CommitSize.LARGE, True) == 63
    assert calculate_priority(CommitType.CHORE, CommitSize.SMALL, False) > calculate_priority(
        CommitType.TEST, CommitSize.SMALL, False
    )


class TestCommitAssembler:

    def test_assemble_ids_and_fields(self, make_change):
        groups = [
            build_group("code_changes", [make_change("pkg/new.go", ChangeType.ADD, additions=30)], "r", 100),
            build_group("docs", [make_change("README.md", additions=2)], "r", 100),
        ]
        commits = CommitAssembler().assemble(groups)

        assert [c.id for c in commits] == ["commit_1", "commit_2"]
        first = commits[0]
        assert first.type == CommitType.FEAT
        assert first.scope == "pkg"
        assert first.size == CommitSize.MEDIUM
        assert first.files == ["pkg/new.go"]
        assert first.dependencies == []
        assert first.metadata["group_id"] == "code_changes"
        assert first.message.type == "feat"
        assert commits[1].type == CommitType.DOCS

    def test_message_failure_uses_fallback(self, make_change):
        group = build_group("g", [make_change("main.go")], "r", 100)
        commit = CommitAssembler(FailingGenerator()).assemble([group])[0]
        assert commit.message.subject == "fallback message"
