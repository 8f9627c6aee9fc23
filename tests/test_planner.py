from collections import Counter
from datetime import timedelta

import pytest

from commitplan.commit.conventional import CommitType
from commitplan.commit.message_generator import MessageStyle
from commitplan.commit.models import ChangeType, CommitStrategy
from commitplan.commit.planner import CommitPlanner, PlannerConfig


@pytest.fixture
def mixed_changes(make_change):
    changes = [make_change(f"src/core/module_{i}.py", additions=i) for i in range(12)]
    changes += [make_change(f"src/web/view_{i}.js", ChangeType.ADD, additions=5) for i in range(6)]
    changes += [make_change(f"tests/test_module_{i}.py") for i in range(5)]
    changes += [make_change("docs/usage.md"), make_change("README.md")]
    changes += [make_change("pyproject.toml"), make_change("config/app.yaml")]
    changes += [make_change("old/legacy.py", ChangeType.DELETE)]
    return changes


def planned_changes(plan):
    return [c for commit in plan.commits for c in commit.changes]


class TestEndToEnd:

    def test_go_project_scenario(self, go_project_changes):
        planner = CommitPlanner(PlannerConfig(separate_tests=True, separate_docs=True))
        plan = planner.create_plan(go_project_changes)

        assert len(plan.commits) == 3
        assert [c.files for c in plan.commits] == [["main.go"], ["main_test.go"], ["README.md"]]
        assert [c.type for c in plan.commits] == [CommitType.CHORE, CommitType.TEST, CommitType.DOCS]
        assert [c.metadata["group_type"] for c in plan.commits] == ["mixed", "test", "docs"]
        assert plan.strategy == CommitStrategy.LOGICAL
        assert plan.total_changes == 3
        assert plan.estimated_time == timedelta(minutes=6)

        assert plan.validation_result.valid
        assert plan.validation_result.score == 1.0
        assert plan.validation_result.errors == []
        assert plan.validation_result.warnings == []

    def test_empty_input(self):
        plan = CommitPlanner().create_plan([])

        assert plan.commits == []
        assert plan.strategy == CommitStrategy.ATOMIC
        assert plan.total_changes == 0
        assert plan.estimated_time == timedelta()
        assert plan.validation_result is None

    def test_validation_can_be_disabled(self, go_project_changes):
        plan = CommitPlanner(PlannerConfig(validate_before_commit=False)).create_plan(go_project_changes)
        assert plan.validation_result is None


@pytest.mark.parametrize("config", [
    PlannerConfig(),
    PlannerConfig(separate_tests=True, separate_docs=True),
    PlannerConfig(atomic_commits=True),
    PlannerConfig(group_by_type=True),
    PlannerConfig(group_by_module=True),
    PlannerConfig(group_by_feature=True),
    PlannerConfig(min_group_size=3, max_group_size=4),
    PlannerConfig(max_commit_size=3, max_group_size=10),
], ids=["logical", "separated", "atomic", "type", "module", "feature", "merge-split", "tight"])
def test_every_change_planned_exactly_once(mixed_changes, config):
    plan = CommitPlanner(config).create_plan(mixed_changes)

    assert Counter(planned_changes(plan)) == Counter(mixed_changes)
    assert all(commit.changes for commit in plan.commits)
    assert len({c.id for c in plan.commits}) == len(plan.commits)


def test_commit_size_bound(mixed_changes):
    config = PlannerConfig(max_commit_size=4, max_group_size=50)
    plan = CommitPlanner(config).create_plan(mixed_changes)

    assert all(len(commit.files) <= 4 for commit in plan.commits)


def test_plan_is_deterministic(mixed_changes):
    planner = CommitPlanner(PlannerConfig(group_by_module=True))
    first = planner.create_plan(mixed_changes).to_dict()
    second = planner.create_plan(list(mixed_changes)).to_dict()
    assert first == second


def test_overlapping_strategies_create_dependencies(make_change):
    changes = [make_change("pkg/a.go"), make_change("cmd/b.go")]
    plan = CommitPlanner(PlannerConfig(group_by_type=True, group_by_module=True)).create_plan(changes)

    assert len(plan.commits) == 3
    assert any(plan.dependencies.values())
    for commit in plan.commits:
        position = plan.commits.index(commit)
        for dep in commit.dependencies:
            assert dep in {c.id for c in plan.commits[:position]}


def test_preview(go_project_changes):
    planner = CommitPlanner(PlannerConfig(separate_tests=True, separate_docs=True))
    preview = planner.preview(planner.create_plan(go_project_changes))

    assert "Commit plan: 3 commits, 3 changes" in preview
    assert "Strategy: logical" in preview
    assert "1. [commit_1] chore: update main.go" in preview
    assert "type: chore, size: small, priority: 28" in preview
    assert "Changes to build process or auxiliary tools" in preview
    assert "Validation passed" in preview
    assert planner.preview(planner.create_plan([])) == "No commits planned."


def test_to_dict(go_project_changes):
    plan = CommitPlanner(PlannerConfig(separate_tests=True)).create_plan(go_project_changes)
    data = plan.to_dict()

    assert data["strategy"] == plan.strategy.value
    assert data["total_changes"] == 3
    assert data["commits"][0]["id"] == plan.commits[0].id
    assert data["validation"]["valid"] is plan.validation_result.valid


class TestPlannerConfig:

    def test_from_env(self):
        config = PlannerConfig.from_env({
            "COMMITPLAN_ATOMIC_COMMITS": "yes",
            "COMMITPLAN_MAX_COMMIT_SIZE": "25",
            "COMMITPLAN_MIN_GROUP_SIZE": "not-a-number",
            "COMMITPLAN_MESSAGE_STYLE": "Traditional",
            "COMMITPLAN_REQUIRED_SCOPES": "api, web,,",
            "COMMITPLAN_DRY_RUN": "false",
        })

        assert config.atomic_commits is True
        assert config.max_commit_size == 25
        assert config.min_group_size == 1
        assert config.message_style == MessageStyle.TRADITIONAL
        assert config.required_scopes == ("api", "web")
        assert config.dry_run is False
        assert config.validate_before_commit is True

    def test_defaults_from_empty_env(self):
        assert PlannerConfig.from_env({}) == PlannerConfig()

    def test_traditional_style_disables_conventional_validation(self):
        config = PlannerConfig(message_style=MessageStyle.TRADITIONAL)
        assert config.validator_config().conventional_commits is False

    def test_traditional_plan_validates(self, go_project_changes):
        config = PlannerConfig(message_style=MessageStyle.TRADITIONAL, separate_tests=True, separate_docs=True)
        plan = CommitPlanner(config).create_plan(go_project_changes)

        assert plan.commits[0].message.full == "Update main.go\n\nM main.go"
        assert plan.validation_result.valid

    def test_non_positive_sizes_fall_back_to_defaults(self):
        config = PlannerConfig.from_env({
            "COMMITPLAN_MAX_COMMIT_SIZE": "-5",
            "COMMITPLAN_MAX_GROUP_SIZE": "0",
            "COMMITPLAN_MAX_SUBJECT_LENGTH": "-1",
        })

        assert config.max_commit_size == 100
        assert config.max_group_size == 20
        assert config.max_subject_length == 50

    def test_negative_commit_size_keeps_plan_valid(self, make_change):
        config = PlannerConfig(max_commit_size=-5, max_subject_length=0)
        plan = CommitPlanner(config).create_plan([make_change("main.go")])

        assert plan.validation_result.valid
        assert plan.validation_result.errors == []
