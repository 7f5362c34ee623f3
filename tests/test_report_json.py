from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from timetrack_dashboard.io.report_json import load_report, parse_report


def test_parse_report_aggregates_when_summary_missing(report_payload: dict[str, Any]) -> None:
    report = parse_report(report_payload)

    assert report.project.name == "Time Tracker"
    assert report.project.path == "group/time-tracker"
    assert len(report.issues) == 4
    assert report.timelog_count == 4
    assert report.issues[0].iid == "1"
    assert report.issues[1].labels == ("backend",)
    assert report.issues[3].web_url is None

    summary = report.summary
    assert summary.total_seconds == pytest.approx(18000.0)
    assert [group.label for group in summary.by_user] == ["Alice A.", "Bob B.", "Carol C."]
    assert [group.label for group in summary.by_epic] == ["Auth", "Reporting"]
    assert summary.by_epic[0].hints.epic_url == "https://gitlab.example.com/epics/3"
    assert [group.label for group in summary.by_state] == ["closed", "opened"]
    assert [bucket.week_start for bucket in summary.weekly_by_user] == [
        "2026-10-05",
        "2026-10-12",
    ]


def test_parse_report_reads_dates_commits_and_warnings(report_payload: dict[str, Any]) -> None:
    report = parse_report(report_payload)

    assert report.generated_at is not None
    assert report.generated_at.year == 2026
    assert report.range.start is not None and report.range.start.day == 6
    assert report.commit_range.start is not None and report.commit_range.start.month == 10
    assert [day.count for day in report.commit_activity] == [0, 3, 6]
    assert report.warnings == ("Some timelogs were outside the selected range.",)


def test_parse_report_prefers_provided_summary(report_payload: dict[str, Any]) -> None:
    report_payload["summary"] = {
        "totalSeconds": 7200,
        "byUser": [{"label": "Alice", "seconds": 7200, "hints": {"username": "alice"}}],
        "byIssue": [
            {"label": "#1 Login form", "seconds": 7200, "hints": {"issueUrl": "https://x/1"}}
        ],
        "weeklyByUser": [
            {
                "weekStart": "2026-10-12",
                "label": "Week of Oct 12",
                "totalSeconds": 7200,
                "totals": [
                    {"userId": "gid://user/alice", "username": "alice", "userName": "Alice", "seconds": 7200}
                ],
            }
        ],
        "weeklyEpicBreakdown": [
            {
                "weekStart": "2026-10-12",
                "label": "Week of Oct 12",
                "totals": [{"epic": "Auth", "seconds": 7200}],
            }
        ],
    }

    summary = parse_report(report_payload).summary

    assert summary.total_seconds == pytest.approx(7200.0)
    assert summary.by_user[0].hints.username == "alice"
    assert summary.by_issue[0].hints.issue_url == "https://x/1"
    assert summary.by_epic == ()
    assert summary.weekly_by_user[0].totals[0].user_name == "Alice"
    assert summary.weekly_epic_breakdown[0].seconds_for("Auth") == pytest.approx(7200.0)


def test_parse_report_accepts_time_spent_alias(report_payload: dict[str, Any]) -> None:
    report_payload["issues"][0]["timelogs"][0] = {
        "timeSpent": 600,
        "user": {"username": "dora"},
    }

    report = parse_report(report_payload)

    log = report.issues[0].timelogs[0]
    assert log.seconds == pytest.approx(600.0)
    assert log.user.id == "dora"
    assert log.spent_at is None


def test_parse_report_rejects_negative_estimate(report_payload: dict[str, Any]) -> None:
    report_payload["issues"][0]["timeEstimate"] = -5

    with pytest.raises(ValueError, match=r"issues\[0\]\.timeEstimate"):
        parse_report(report_payload)


def test_parse_report_requires_project_name(report_payload: dict[str, Any]) -> None:
    report_payload["project"] = {"fullPath": "group/x"}

    with pytest.raises(ValueError, match="project.name"):
        parse_report(report_payload)


def test_parse_report_rejects_invalid_timestamp(report_payload: dict[str, Any]) -> None:
    report_payload["generatedAt"] = "not-a-date"

    with pytest.raises(ValueError, match="generatedAt"):
        parse_report(report_payload)


def test_parse_report_rejects_anonymous_timelog(report_payload: dict[str, Any]) -> None:
    report_payload["issues"][0]["timelogs"][0]["user"] = {"name": "Nobody"}

    with pytest.raises(ValueError, match="needs an id or username"):
        parse_report(report_payload)


def test_parse_report_rejects_negative_commit_count(report_payload: dict[str, Any]) -> None:
    report_payload["commitActivity"][0]["count"] = -1

    with pytest.raises(ValueError, match="commitActivity"):
        parse_report(report_payload)


def test_load_report_reads_file(tmp_path: Path, report_payload: dict[str, Any]) -> None:
    path = tmp_path / "report.json"
    path.write_text(json.dumps(report_payload), encoding="utf-8")

    report = load_report(path, week_start_day=0)

    assert report.project.name == "Time Tracker"
    assert report.summary.weekly_by_user[0].week_start == "2026-10-04"


def test_load_report_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "report.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid JSON"):
        load_report(path)


def test_load_report_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "report.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        load_report(path)


@pytest.mark.parametrize("count", [float("inf"), float("nan"), 2.5])
def test_parse_report_rejects_non_integral_commit_count(
    report_payload: dict[str, Any], count: float
) -> None:
    report_payload["commitActivity"][1]["count"] = count

    with pytest.raises(ValueError, match=r"commitActivity\[1\]\.count"):
        parse_report(report_payload)


def test_load_report_rejects_infinite_commit_count(
    tmp_path: Path, report_payload: dict[str, Any]
) -> None:
    text = json.dumps(report_payload).replace('"count": 6', '"count": Infinity')
    path = tmp_path / "report.json"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ValueError, match=r"commitActivity\[2\]\.count"):
        load_report(path)


def test_parse_report_accepts_whole_float_commit_count(report_payload: dict[str, Any]) -> None:
    report_payload["commitActivity"][1]["count"] = 3.0
    assert parse_report(report_payload).commit_activity[1].count == 3


def test_parse_report_keeps_empty_string_hints(report_payload: dict[str, Any]) -> None:
    report_payload["summary"] = {
        "totalSeconds": 60,
        "byUser": [{"label": "Alice", "seconds": 60, "hints": {"username": ""}}],
    }

    group = parse_report(report_payload).summary.by_user[0]

    assert group.hints is not None
    assert group.hints.username == ""
    assert group.hints.issue_url is None
