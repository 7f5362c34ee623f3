from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

from timetrack_dashboard.features.aggregates import DEFAULT_WEEK_START_DAY, build_report_summary
from timetrack_dashboard.report.models import (
    CommitDay,
    DateRange,
    EpicRef,
    Issue,
    ProjectInfo,
    ProjectTimeReport,
    ReportSummary,
    SummaryGroup,
    SummaryHints,
    Timelog,
    TimelogUser,
    WeeklyEpicBucket,
    WeeklyEpicTotal,
    WeeklyUserBucket,
    WeeklyUserTotal,
)

LOGGER = logging.getLogger(__name__)


def _require_mapping(value: Any, *, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"report field '{field_name}' must be an object")
    return value


def _require_list(value: Any, *, field_name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"report field '{field_name}' must be a list")
    return value


def _require_string(value: Any, *, field_name: str) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"report field '{field_name}' must be a non-empty string")
    return value.strip()


def _optional_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _hint_string(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_seconds(value: Any, *, field_name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"report field '{field_name}' must be a number")
    seconds = float(value)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"report field '{field_name}' must be >= 0, got {value!r}")
    return seconds


def _parse_timestamp(value: Any, *, field_name: str) -> datetime | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, str):
        raise ValueError(f"report field '{field_name}' must be an ISO datetime string or null")
    try:
        parsed = pd.Timestamp(value.strip())
    except ValueError as exc:
        raise ValueError(f"invalid datetime for report field '{field_name}'") from exc
    if pd.isna(parsed):
        raise ValueError(f"invalid datetime for report field '{field_name}'")
    return parsed.to_pydatetime()


def _parse_range(payload: Any, *, field_name: str) -> DateRange:
    if payload is None:
        return DateRange()
    mapping = _require_mapping(payload, field_name=field_name)
    return DateRange(
        start=_parse_timestamp(mapping.get("from"), field_name=f"{field_name}.from"),
        end=_parse_timestamp(mapping.get("to"), field_name=f"{field_name}.to"),
    )


def _parse_labels(value: Any, *, field_name: str) -> tuple[str, ...]:
    if isinstance(value, Mapping):
        value = value.get("nodes")
    labels: list[str] = []
    for index, item in enumerate(_require_list(value, field_name=field_name)):
        raw = item.get("title") if isinstance(item, Mapping) else item
        labels.append(_require_string(raw, field_name=f"{field_name}[{index}]"))
    return tuple(labels)


def _parse_timelog(payload: Any, *, field_name: str) -> Timelog:
    mapping = _require_mapping(payload, field_name=field_name)
    user = _require_mapping(mapping.get("user") or {}, field_name=f"{field_name}.user")
    username = _optional_string(user.get("username"))
    user_id = _optional_string(user.get("id")) or username
    if user_id is None:
        raise ValueError(f"report field '{field_name}.user' needs an id or username")
    seconds_value = mapping.get("seconds", mapping.get("timeSpent"))
    return Timelog(
        seconds=_parse_seconds(seconds_value, field_name=f"{field_name}.seconds"),
        spent_at=_parse_timestamp(mapping.get("spentAt"), field_name=f"{field_name}.spentAt"),
        user=TimelogUser(id=user_id, username=username, name=_optional_string(user.get("name"))),
    )


def _parse_issue(payload: Any, *, field_name: str) -> Issue:
    mapping = _require_mapping(payload, field_name=field_name)
    epic_payload = mapping.get("epic")
    epic = None
    if epic_payload is not None:
        epic_mapping = _require_mapping(epic_payload, field_name=f"{field_name}.epic")
        epic = EpicRef(
            title=_require_string(epic_mapping.get("title"), field_name=f"{field_name}.epic.title"),
            iid=_optional_string(epic_mapping.get("iid")),
            web_url=_optional_string(epic_mapping.get("webUrl")),
        )
    timelogs = tuple(
        _parse_timelog(item, field_name=f"{field_name}.timelogs[{index}]")
        for index, item in enumerate(
            _require_list(mapping.get("timelogs"), field_name=f"{field_name}.timelogs")
        )
    )
    return Issue(
        id=_require_string(mapping.get("id"), field_name=f"{field_name}.id"),
        iid=_require_string(mapping.get("iid"), field_name=f"{field_name}.iid"),
        title=_require_string(mapping.get("title"), field_name=f"{field_name}.title"),
        web_url=_optional_string(mapping.get("webUrl")),
        state=_optional_string(mapping.get("state")) or "opened",
        time_estimate=_parse_seconds(
            mapping.get("timeEstimate"), field_name=f"{field_name}.timeEstimate"
        ),
        epic=epic,
        labels=_parse_labels(mapping.get("labels"), field_name=f"{field_name}.labels"),
        timelogs=timelogs,
    )


def _parse_group(payload: Any, *, field_name: str) -> SummaryGroup:
    mapping = _require_mapping(payload, field_name=field_name)
    hints_payload = mapping.get("hints")
    hints = None
    if hints_payload is not None:
        hints_mapping = _require_mapping(hints_payload, field_name=f"{field_name}.hints")
        hints = SummaryHints(
            username=_hint_string(hints_mapping.get("username")),
            issue_url=_hint_string(hints_mapping.get("issueUrl")),
            epic_url=_hint_string(hints_mapping.get("epicUrl")),
        )
    return SummaryGroup(
        label=_require_string(mapping.get("label"), field_name=f"{field_name}.label"),
        seconds=_parse_seconds(mapping.get("seconds"), field_name=f"{field_name}.seconds"),
        hints=hints,
    )


def _parse_groups(summary: Mapping[str, Any], key: str) -> tuple[SummaryGroup, ...]:
    return tuple(
        _parse_group(item, field_name=f"summary.{key}[{index}]")
        for index, item in enumerate(_require_list(summary.get(key), field_name=f"summary.{key}"))
    )


def _parse_weekly_by_user(summary: Mapping[str, Any]) -> tuple[WeeklyUserBucket, ...]:
    buckets: list[WeeklyUserBucket] = []
    items = _require_list(summary.get("weeklyByUser"), field_name="summary.weeklyByUser")
    for index, item in enumerate(items):
        name = f"summary.weeklyByUser[{index}]"
        mapping = _require_mapping(item, field_name=name)
        totals = []
        for total_index, total in enumerate(
            _require_list(mapping.get("totals"), field_name=f"{name}.totals")
        ):
            total_name = f"{name}.totals[{total_index}]"
            total_mapping = _require_mapping(total, field_name=total_name)
            username = _optional_string(total_mapping.get("username"))
            user_id = _optional_string(total_mapping.get("userId")) or username
            if user_id is None:
                raise ValueError(f"report field '{total_name}' needs a userId or username")
            totals.append(
                WeeklyUserTotal(
                    user_id=user_id,
                    username=username,
                    user_name=_optional_string(total_mapping.get("userName")) or user_id,
                    seconds=_parse_seconds(
                        total_mapping.get("seconds"), field_name=f"{total_name}.seconds"
                    ),
                )
            )
        buckets.append(
            WeeklyUserBucket(
                week_start=_require_string(mapping.get("weekStart"), field_name=f"{name}.weekStart"),
                label=_require_string(mapping.get("label"), field_name=f"{name}.label"),
                total_seconds=_parse_seconds(
                    mapping.get("totalSeconds"), field_name=f"{name}.totalSeconds"
                ),
                totals=tuple(totals),
            )
        )
    return tuple(buckets)


def _parse_weekly_epics(summary: Mapping[str, Any]) -> tuple[WeeklyEpicBucket, ...]:
    buckets: list[WeeklyEpicBucket] = []
    items = _require_list(
        summary.get("weeklyEpicBreakdown"), field_name="summary.weeklyEpicBreakdown"
    )
    for index, item in enumerate(items):
        name = f"summary.weeklyEpicBreakdown[{index}]"
        mapping = _require_mapping(item, field_name=name)
        totals = []
        for total_index, total in enumerate(
            _require_list(mapping.get("totals"), field_name=f"{name}.totals")
        ):
            total_name = f"{name}.totals[{total_index}]"
            total_mapping = _require_mapping(total, field_name=total_name)
            totals.append(
                WeeklyEpicTotal(
                    epic=_require_string(total_mapping.get("epic"), field_name=f"{total_name}.epic"),
                    seconds=_parse_seconds(
                        total_mapping.get("seconds"), field_name=f"{total_name}.seconds"
                    ),
                )
            )
        buckets.append(
            WeeklyEpicBucket(
                week_start=_require_string(mapping.get("weekStart"), field_name=f"{name}.weekStart"),
                label=_require_string(mapping.get("label"), field_name=f"{name}.label"),
                totals=tuple(totals),
            )
        )
    return tuple(buckets)


def _parse_summary(payload: Any) -> ReportSummary:
    summary = _require_mapping(payload, field_name="summary")
    return ReportSummary(
        total_seconds=_parse_seconds(summary.get("totalSeconds"), field_name="summary.totalSeconds"),
        by_user=_parse_groups(summary, "byUser"),
        by_issue=_parse_groups(summary, "byIssue"),
        by_epic=_parse_groups(summary, "byEpic"),
        by_label=_parse_groups(summary, "byLabel"),
        by_state=_parse_groups(summary, "byState"),
        weekly_by_user=_parse_weekly_by_user(summary),
        weekly_epic_breakdown=_parse_weekly_epics(summary),
    )


def _parse_commit_day(payload: Any, *, field_name: str) -> CommitDay:
    mapping = _require_mapping(payload, field_name=field_name)
    count = mapping.get("count", 0)
    if (
        isinstance(count, bool)
        or not isinstance(count, (int, float))
        or not math.isfinite(count)
        or count < 0
        or not float(count).is_integer()
    ):
        raise ValueError(f"report field '{field_name}.count' must be a whole number >= 0")
    date = _require_string(mapping.get("date"), field_name=f"{field_name}.date")
    return CommitDay(
        date=date,
        count=int(count),
        label=_optional_string(mapping.get("label")) or date,
    )


def parse_report(
    payload: Mapping[str, Any],
    *,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> ProjectTimeReport:
    """Validate a report payload and build the read-only report model.

    When the payload carries no ``summary`` the groupings are derived from the
    issue timelogs.
    """
    project = _require_mapping(payload.get("project"), field_name="project")
    issues = tuple(
        _parse_issue(item, field_name=f"issues[{index}]")
        for index, item in enumerate(_require_list(payload.get("issues"), field_name="issues"))
    )

    if payload.get("summary") is None:
        LOGGER.info("Report has no summary; aggregating %d issues", len(issues))
        summary = build_report_summary(issues, week_start_day=week_start_day)
    else:
        summary = _parse_summary(payload.get("summary"))

    commit_activity = tuple(
        _parse_commit_day(item, field_name=f"commitActivity[{index}]")
        for index, item in enumerate(
            _require_list(payload.get("commitActivity"), field_name="commitActivity")
        )
    )
    warnings = tuple(
        str(item) for item in _require_list(payload.get("warnings"), field_name="warnings")
    )

    return ProjectTimeReport(
        project=ProjectInfo(
            name=_require_string(project.get("name"), field_name="project.name"),
            path=_optional_string(project.get("fullPath")),
            web_url=_optional_string(project.get("webUrl")),
        ),
        summary=summary,
        issues=issues,
        generated_at=_parse_timestamp(payload.get("generatedAt"), field_name="generatedAt"),
        range=_parse_range(payload.get("range"), field_name="range"),
        commit_range=_parse_range(payload.get("commitRange"), field_name="commitRange"),
        commit_activity=commit_activity,
        warnings=warnings,
    )


def load_report(
    path: str | Path,
    *,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> ProjectTimeReport:
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"report file is not valid JSON: {source_path}") from exc
    if not isinstance(payload, Mapping):
        raise ValueError("report file must contain a JSON object")
    report = parse_report(payload, week_start_day=week_start_day)
    LOGGER.info(
        "Loaded report for %s: %d issues, %d timelogs",
        report.project.name,
        len(report.issues),
        report.timelog_count,
    )
    return report
