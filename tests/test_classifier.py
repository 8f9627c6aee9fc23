import pytest

from commitplan.commit.classifier import (
    classify_change,
    detect_feature,
    determine_group_type,
    extract_module,
    is_breaking_change,
    is_config_file,
    is_doc_file,
    is_test_file,
)
from commitplan.commit.models import ChangeType, GroupType


@pytest.mark.parametrize("path,expected", [
    ("pkg/utils/helper_test.go", True),
    ("src/components/Button.spec.js", True),
    ("tests/test_api.py", True),
    ("pkg/utils/helper.go", False),
])
def test_is_test_file(path, expected):
    assert is_test_file(path) is expected


@pytest.mark.parametrize("path,expected", [
    ("README.md", True),
    ("docs/guide.rst", True),
    ("notes.txt", True),
    ("MANUAL", True),
    ("main.go", False),
])
def test_is_doc_file(path, expected):
    assert is_doc_file(path) is expected


@pytest.mark.parametrize("path,expected", [
    ("settings.yaml", True),
    ("pyproject.toml", True),
    ("app/config/loader.go", True),
    (".env.local", True),
    ("Dockerfile", True),
    ("Makefile", True),
    ("main.go", False),
])
def test_is_config_file(path, expected):
    assert is_config_file(path) is expected


@pytest.mark.parametrize("path,expected", [
    ("pkg/utils/helper.go", "pkg"),
    ("cmd/main.go", "cmd"),
    ("main.go", "root"),
])
def test_extract_module(path, expected):
    assert extract_module(path) == expected


@pytest.mark.parametrize("path,expected", [
    ("pkg/auth/login.go", "authentication"),
    ("pkg/user/profile.go", "user_management"),
    ("internal/api/handler.go", "api"),
    ("web/views/home.go", "ui"),
    ("internal/db/conn.go", "database"),
    ("pkg/utils/helper.go", "pkg_utils"),
    ("main.go", "core"),
])
def test_detect_feature(path, expected):
    assert detect_feature(path) == expected


def test_detect_feature_first_keyword_wins():
    assert detect_feature("internal/api/auth.go") == "authentication"


def test_classify_change_order(make_change):
    assert classify_change(make_change("main_test.go", ChangeType.ADD)) == GroupType.TEST
    assert classify_change(make_change("README.md")) == GroupType.DOCS
    assert classify_change(make_change("config.yaml")) == GroupType.CONFIG
    assert classify_change(make_change("bugfix.go", ChangeType.ADD)) == GroupType.FEATURE
    assert classify_change(make_change("bugfix.go")) == GroupType.FIX
    assert classify_change(make_change("main.go")) == GroupType.MIXED


class TestDetermineGroupType:

    def test_test_majority(self, make_change):
        changes = [make_change("a_test.go"), make_change("b_test.go"), make_change("main.go")]
        assert determine_group_type(changes) == GroupType.TEST

    def test_half_is_not_majority(self, make_change):
        changes = [make_change("a_test.go"), make_change("main.go")]
        assert determine_group_type(changes) == GroupType.MIXED

    def test_fix_beats_feature(self, make_change):
        changes = [make_change("new.go", ChangeType.ADD), make_change("fix_parser.go")]
        assert determine_group_type(changes) == GroupType.FIX

    def test_feature(self, make_change):
        changes = [make_change("new.go", ChangeType.ADD), make_change("main.go")]
        assert determine_group_type(changes) == GroupType.FEATURE

    def test_empty(self):
        assert determine_group_type([]) == GroupType.MIXED


def test_is_breaking_change(make_change):
    assert is_breaking_change([make_change("old.go", ChangeType.DELETE)])
    assert is_breaking_change([make_change("internal/api/routes.go")])
    assert is_breaking_change([make_change("core.go", additions=80, deletions=30)])
    assert not is_breaking_change([make_change("core.go", additions=10, deletions=5)])
