from unittest.mock import MagicMock

import pytest

from commitplan import main as main_module
from commitplan.commit.models import CommitPlan, FileChange, ValidationResult
from commitplan.commit.planner import PlannerConfig
from commitplan.repository import CommitExecutionError, RepositoryError


@pytest.fixture
def source(monkeypatch):
    source = MagicMock()
    source.get_changes.return_value = [FileChange("main.go"), FileChange("README.md")]
    source.current_branch.return_value = "main"
    monkeypatch.setattr(main_module, "GitChangeSource", MagicMock(return_value=source))
    return source


@pytest.fixture
def executor_cls(monkeypatch):
    executor_cls = MagicMock()
    monkeypatch.setattr(main_module, "CommitExecutor", executor_cls)
    return executor_cls


def test_dry_run_prints_plan(source, executor_cls, capsys):
    code = main_module.run({}, PlannerConfig())

    assert code == 0
    assert "Commit plan: 1 commits, 2 changes" in capsys.readouterr().out
    executor_cls.assert_not_called()


def test_apply_plan(source, executor_cls):
    code = main_module.run({}, PlannerConfig(dry_run=False, separate_docs=True))

    assert code == 0
    executor_cls.assert_called_once_with(source.repo, dry_run=False)
    plan = executor_cls.return_value.execute.call_args[0][0]
    assert len(plan.commits) == 2


def test_issue_number_in_message(source, executor_cls):
    code = main_module.run({"COMMITPLAN_ISSUE_NUMBER": "7"}, PlannerConfig(dry_run=False))

    assert code == 0
    plan = executor_cls.return_value.execute.call_args[0][0]
    assert plan.commits[0].message.footer == "Closes #7"


def test_repository_error(monkeypatch, executor_cls):
    monkeypatch.setattr(main_module, "GitChangeSource", MagicMock(side_effect=RepositoryError("not a repo")))
    assert main_module.run({}, PlannerConfig()) == 1


def test_execution_error(source, executor_cls):
    executor_cls.return_value.execute.side_effect = CommitExecutionError("boom")
    assert main_module.run({}, PlannerConfig(dry_run=False)) == 1


def test_invalid_plan_is_not_applied(source, executor_cls, monkeypatch):
    validation = ValidationResult()
    validation.add_error("commit-extremely-large", "Commit commit_1 changes 300 files")
    planner = MagicMock()
    planner.create_plan.return_value = CommitPlan(
        commits=[MagicMock()],
        validation_result=validation,
    )
    planner.preview.return_value = "plan"
    monkeypatch.setattr(main_module, "CommitPlanner", MagicMock(return_value=planner))

    assert main_module.run({}, PlannerConfig(dry_run=False)) == 1
    executor_cls.assert_not_called()


def test_empty_tree(source, executor_cls, capsys):
    source.get_changes.return_value = []

    assert main_module.run({}, PlannerConfig(dry_run=False)) == 0
    assert "No commits planned." in capsys.readouterr().out
    executor_cls.assert_not_called()


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    monkeypatch.setenv("COMMITPLAN_SEPARATE_TESTS", "unset")
    monkeypatch.delenv("COMMITPLAN_SEPARATE_TESTS")
    env_file = tmp_path / ".env"
    env_file.write_text("COMMITPLAN_SEPARATE_TESTS=true\n")

    assert main_module.load_config(str(env_file)).separate_tests is True


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    monkeypatch.setenv("COMMITPLAN_SEPARATE_DOCS", "false")
    env_file = tmp_path / ".env"
    env_file.write_text("COMMITPLAN_SEPARATE_DOCS=true\n")

    assert main_module.load_config(str(env_file)).separate_docs is False
