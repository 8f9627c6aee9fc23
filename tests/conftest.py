import pytest

from commitplan.commit.models import ChangeType, FileChange


@pytest.fixture
def make_change():
    """Factory for FileChange objects with short defaults."""

    def _make(path, change_type=ChangeType.MODIFY, additions=0, deletions=0, **kwargs):
        return FileChange(path=path, change_type=change_type, additions=additions, deletions=deletions, **kwargs)

    return _make


@pytest.fixture
def go_project_changes(make_change):
    """main.go, its test and the README, all modified."""
    return [
        make_change("main.go"),
        make_change("main_test.go"),
        make_change("README.md"),
    ]
