from __future__ import annotations

from timetrack_dashboard.features.ranking import activity_score, rank_issues, top_n
from timetrack_dashboard.report.models import Issue, Timelog, TimelogUser

USER = TimelogUser(id="u1", username="alice", name="Alice")


def _issue(iid: str, estimate: float = 0.0, spent: tuple[float, ...] = ()) -> Issue:
    return Issue(
        id=f"gid://issue/{iid}",
        iid=iid,
        title=f"Issue {iid}",
        time_estimate=estimate,
        timelogs=tuple(Timelog(seconds=seconds, user=USER) for seconds in spent),
    )


def test_activity_score_sums_estimate_and_timelogs() -> None:
    assert activity_score(_issue("1", estimate=100, spent=(20, 30))) == 150


def test_rank_issues_keeps_tied_issues_in_input_order() -> None:
    first = _issue("a", estimate=5)
    low = _issue("c", estimate=1)
    second = _issue("b", estimate=5)

    ranked = rank_issues([first, low, second])

    assert [issue.iid for issue in ranked] == ["a", "b", "c"]


def test_rank_issues_filters_issues_without_activity() -> None:
    idle = _issue("idle")
    zero_log = _issue("zero-log", spent=(0,))
    estimated = _issue("estimated", estimate=60)

    ranked = rank_issues([idle, zero_log, estimated])

    assert [issue.iid for issue in ranked] == ["estimated", "zero-log"]


def test_rank_issues_truncates_and_leaves_input_untouched() -> None:
    issues = [_issue(str(index), estimate=index + 1) for index in range(12)]
    original = list(issues)

    ranked = rank_issues(issues)

    assert len(ranked) == 8
    assert ranked[0].iid == "11"
    assert issues == original
    assert len(rank_issues(issues, limit=None)) == 12


def test_rank_issues_accepts_custom_score() -> None:
    issues = [_issue("a", estimate=10, spent=(1,)), _issue("b", estimate=1, spent=(50,))]
    ranked = rank_issues(issues, score_fn=lambda issue: issue.spent_seconds, limit=1)
    assert [issue.iid for issue in ranked] == ["b"]


def test_rank_issues_with_empty_input() -> None:
    assert rank_issues([]) == []


def test_top_n() -> None:
    assert top_n([1, 2, 3], 2) == [1, 2]
    assert top_n([1, 2, 3], None) == [1, 2, 3]
    assert top_n([], 5) == []
