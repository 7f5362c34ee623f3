from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from timetrack_dashboard.report.models import Issue

DEFAULT_TOP_N = 8

T = TypeVar("T")


def activity_score(issue: Issue) -> float:
    """Estimate plus tracked time, both in seconds."""
    return issue.time_estimate + issue.spent_seconds


def has_activity(issue: Issue) -> bool:
    return issue.time_estimate > 0 or len(issue.timelogs) > 0


def top_n(items: Sequence[T], limit: int | None = DEFAULT_TOP_N) -> list[T]:
    if limit is None:
        return list(items)
    return list(items[:limit])


def rank_issues(
    issues: Sequence[Issue],
    score_fn: Callable[[Issue], float] = activity_score,
    limit: int | None = DEFAULT_TOP_N,
) -> list[Issue]:
    """Active issues sorted by descending score; ties keep their input order."""
    relevant = [issue for issue in issues if has_activity(issue)]
    # sorted() is stable, including with reverse=True.
    ranked = sorted(relevant, key=score_fn, reverse=True)
    return top_n(ranked, limit)
