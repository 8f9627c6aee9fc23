from datetime import timedelta

from commitplan.commit.conventional import CommitType, ConventionalMessage
from commitplan.commit.models import CommitSize, CommitStrategy, FileChange, PlannedCommit
from commitplan.commit.scheduler import (
    CommitScheduler,
    analyze_dependencies,
    build_dependency_map,
    determine_strategy,
    estimate_commit_time,
    sort_commits_by_dependencies,
)


def make_commit(commit_id, paths, commit_type=CommitType.CHORE, priority=10, size=CommitSize.SMALL):
    return PlannedCommit(
        id=commit_id,
        message=ConventionalMessage(type=commit_type.value, subject=f"update {commit_id}"),
        changes=[FileChange(path=p) for p in paths],
        type=commit_type,
        priority=priority,
        size=size,
    )


def test_analyze_dependencies_deduplicates():
    first = make_commit("commit_1", ["a.go", "b.go"])
    second = make_commit("commit_2", ["c.go"])
    third = make_commit("commit_3", ["a.go", "b.go", "c.go"])

    assert analyze_dependencies(third, [first, second]) == ["commit_1", "commit_2"]
    assert analyze_dependencies(first, []) == []


def test_build_dependency_map_returns_new_commits():
    commits = [make_commit("commit_1", ["a.go"]), make_commit("commit_2", ["a.go"])]

    updated, deps = build_dependency_map(commits)

    assert deps == {"commit_1": [], "commit_2": ["commit_1"]}
    assert updated[1].dependencies == ["commit_1"]
    assert commits[1].dependencies == []


def test_sort_by_priority_is_stable():
    commits = [
        make_commit("commit_1", ["a.go"], priority=10),
        make_commit("commit_2", ["b.go"], priority=30),
        make_commit("commit_3", ["c.go"], priority=10),
    ]
    ordered = sort_commits_by_dependencies(commits, {})
    assert [c.id for c in ordered] == ["commit_2", "commit_1", "commit_3"]


def test_dependency_beats_priority():
    commits = [
        make_commit("commit_1", ["a.go"], priority=5),
        make_commit("commit_2", ["a.go"], priority=50),
    ]
    ordered = sort_commits_by_dependencies(commits, {"commit_2": ["commit_1"]})
    assert [c.id for c in ordered] == ["commit_1", "commit_2"]


def test_scheduler_orders_and_maps():
    commits = [
        make_commit("commit_1", ["a.go"], priority=5),
        make_commit("commit_2", ["a.go"], priority=60),
        make_commit("commit_3", ["b.go"], priority=1),
    ]
    ordered, deps = CommitScheduler().schedule(commits)

    assert [c.id for c in ordered] == ["commit_1", "commit_2", "commit_3"]
    assert deps == {"commit_1": [], "commit_2": ["commit_1"], "commit_3": []}
    assert ordered[1].dependencies == ["commit_1"]


class TestDetermineStrategy:

    def test_single_commit(self):
        assert determine_strategy([make_commit("commit_1", ["a.go"], CommitType.FEAT)]) == CommitStrategy.ATOMIC

    def test_feature(self):
        commits = [make_commit("commit_1", ["a.go"], CommitType.FEAT), make_commit("commit_2", ["b.go"])]
        assert determine_strategy(commits) == CommitStrategy.FEATURE

    def test_logical(self):
        commits = [make_commit("commit_1", ["a.go"], CommitType.TEST), make_commit("commit_2", ["b.go"])]
        assert determine_strategy(commits) == CommitStrategy.LOGICAL

    def test_same_type(self):
        commits = [make_commit("commit_1", ["a.go"]), make_commit("commit_2", ["b.go"])]
        assert determine_strategy(commits) == CommitStrategy.ATOMIC


def test_estimate_commit_time():
    commits = [
        make_commit("commit_1", ["a.go"], size=CommitSize.SMALL),
        make_commit("commit_2", ["b.go"], size=CommitSize.MEDIUM),
        make_commit("commit_3", ["c.go"], size=CommitSize.LARGE),
        make_commit("commit_4", ["d.go"], size=CommitSize.HUGE),
    ]
    assert estimate_commit_time(commits) == timedelta(minutes=8 + 1 + 3 + 5)
    assert estimate_commit_time([]) == timedelta()
