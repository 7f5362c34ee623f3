from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from timetrack_dashboard.features.aggregates import (
    NO_EPIC_LABEL,
    NO_LABEL_LABEL,
    assign_week_start,
    build_report_summary,
    build_timelog_frame,
    week_label,
)
from timetrack_dashboard.report.models import EpicRef, Issue, Timelog, TimelogUser

ALICE = TimelogUser(id="u1", username="alice", name="Alice")
BOB = TimelogUser(id="u2", username="bob", name="Bob")
GHOST = TimelogUser(id="u3")


def _at(day: int, hour: int = 10) -> datetime:
    return datetime(2026, 10, day, hour, tzinfo=timezone.utc)


def _issues() -> list[Issue]:
    return [
        Issue(
            id="i1",
            iid="1",
            title="Login",
            web_url="https://example.com/issues/1",
            state="closed",
            epic=EpicRef(title="Auth", iid="3", web_url="https://example.com/epics/3"),
            labels=("frontend", "security"),
            timelogs=(
                Timelog(seconds=3600, user=ALICE, spent_at=_at(14)),
                Timelog(seconds=1800, user=BOB, spent_at=_at(19)),
            ),
        ),
        Issue(
            id="i2",
            iid="2",
            title="Docs",
            state="opened",
            timelogs=(
                Timelog(seconds=7200, user=ALICE, spent_at=_at(12)),
                Timelog(seconds=900, user=GHOST),
            ),
        ),
    ]


def test_build_timelog_frame_has_one_row_per_timelog() -> None:
    frame = build_timelog_frame(_issues())

    assert len(frame) == 4
    assert frame["seconds"].sum() == pytest.approx(13500.0)
    assert frame.loc[2, "epic"] == NO_EPIC_LABEL
    assert frame.loc[2, "labels"] == [NO_LABEL_LABEL]
    assert frame.loc[3, "user_key"] == "u3"
    assert pd.isna(frame.loc[3, "spent_at"])


def test_build_timelog_frame_without_issues() -> None:
    frame = build_timelog_frame([])
    assert frame.empty
    assert "seconds" in frame.columns


def test_summary_groups_are_ranked_by_seconds() -> None:
    summary = build_report_summary(_issues())

    assert summary.total_seconds == pytest.approx(13500.0)
    assert [(group.label, group.seconds) for group in summary.by_user] == [
        ("Alice", 10800.0),
        ("Bob", 1800.0),
        ("u3", 900.0),
    ]
    assert summary.by_user[0].hints is not None
    assert summary.by_user[0].hints.username == "alice"
    assert summary.by_user[2].hints.username is None

    assert [group.label for group in summary.by_issue] == ["#2 Docs", "#1 Login"]
    assert summary.by_issue[1].hints.issue_url == "https://example.com/issues/1"

    assert [(group.label, group.seconds) for group in summary.by_epic] == [
        (NO_EPIC_LABEL, 8100.0),
        ("Auth", 5400.0),
    ]
    assert summary.by_epic[1].hints.epic_url == "https://example.com/epics/3"


def test_labels_count_time_once_per_label() -> None:
    summary = build_report_summary(_issues())

    assert [(group.label, group.seconds) for group in summary.by_label] == [
        (NO_LABEL_LABEL, 8100.0),
        ("frontend", 5400.0),
        ("security", 5400.0),
    ]
    assert summary.by_label[0].hints is None


def test_state_ties_break_on_label() -> None:
    issues = [
        Issue(id="a", iid="1", title="A", state="opened", timelogs=(Timelog(60, ALICE),)),
        Issue(id="b", iid="2", title="B", state="closed", timelogs=(Timelog(60, ALICE),)),
    ]
    summary = build_report_summary(issues)
    assert [group.label for group in summary.by_state] == ["closed", "opened"]


def test_weekly_buckets_start_on_configured_day() -> None:
    summary = build_report_summary(_issues())

    assert [bucket.week_start for bucket in summary.weekly_by_user] == [
        "2026-10-12",
        "2026-10-19",
    ]
    first = summary.weekly_by_user[0]
    assert first.label == "Week of Oct 12"
    assert first.total_seconds == pytest.approx(10800.0)
    assert [(total.username, total.seconds) for total in first.totals] == [("alice", 10800.0)]

    assert [bucket.week_start for bucket in summary.weekly_epic_breakdown] == [
        "2026-10-12",
        "2026-10-19",
    ]
    assert summary.weekly_epic_breakdown[0].seconds_for(NO_EPIC_LABEL) == pytest.approx(7200.0)
    assert summary.weekly_epic_breakdown[0].seconds_for("Auth") == pytest.approx(3600.0)
    assert summary.weekly_epic_breakdown[1].seconds_for("Auth") == pytest.approx(1800.0)


def test_sunday_week_start() -> None:
    summary = build_report_summary(_issues(), week_start_day=0)
    assert [bucket.week_start for bucket in summary.weekly_by_user] == [
        "2026-10-11",
        "2026-10-18",
    ]


def test_assign_week_start_and_label() -> None:
    stamps = pd.Series(pd.to_datetime(["2026-10-14T23:30:00Z", "2026-10-12T00:00:00Z"], utc=True))

    starts = assign_week_start(stamps, week_start_day=1)

    assert [value.strftime("%Y-%m-%d") for value in starts] == ["2026-10-12", "2026-10-12"]
    assert week_label(starts.iloc[0]) == "Week of Oct 12"


def test_summary_without_timelogs_is_empty() -> None:
    summary = build_report_summary([Issue(id="x", iid="9", title="Idle")])

    assert summary.total_seconds == 0.0
    assert summary.by_user == ()
    assert summary.weekly_by_user == ()
