from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pandas as pd

from timetrack_dashboard.report.models import (
    Issue,
    ReportSummary,
    SummaryGroup,
    SummaryHints,
    WeeklyEpicBucket,
    WeeklyEpicTotal,
    WeeklyUserBucket,
    WeeklyUserTotal,
)

NO_EPIC_LABEL = "No epic"
NO_LABEL_LABEL = "No label"
DEFAULT_WEEK_START_DAY = 1

TIMELOG_COLUMNS = [
    "issue_id",
    "issue_label",
    "issue_url",
    "epic",
    "epic_url",
    "labels",
    "state",
    "user_key",
    "user_id",
    "username",
    "user_name",
    "seconds",
    "spent_at",
]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def build_timelog_frame(issues: Sequence[Issue]) -> pd.DataFrame:
    """One row per timelog, carrying the issue attributes the summaries group by."""
    rows: list[dict[str, Any]] = []
    for issue in issues:
        for log in issue.timelogs:
            rows.append(
                {
                    "issue_id": issue.id,
                    "issue_label": issue.display_label,
                    "issue_url": issue.web_url,
                    "epic": issue.epic.title if issue.epic else NO_EPIC_LABEL,
                    "epic_url": issue.epic.web_url if issue.epic else None,
                    "labels": list(issue.labels) or [NO_LABEL_LABEL],
                    "state": issue.state,
                    "user_key": log.user.username or log.user.id,
                    "user_id": log.user.id,
                    "username": log.user.username,
                    "user_name": log.user.display_name,
                    "seconds": float(log.seconds),
                    "spent_at": log.spent_at,
                }
            )
    frame = pd.DataFrame(rows, columns=TIMELOG_COLUMNS)
    frame["seconds"] = pd.to_numeric(frame["seconds"], errors="coerce").fillna(0.0)
    frame["spent_at"] = pd.to_datetime(frame["spent_at"], utc=True, errors="coerce")
    return frame


def _ranked(grouped: pd.DataFrame) -> pd.DataFrame:
    return grouped.sort_values(
        ["seconds", "label"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)


def _summary_groups(
    frame: pd.DataFrame,
    key: str,
    label_column: str,
    hint_columns: dict[str, str],
) -> tuple[SummaryGroup, ...]:
    if frame.empty:
        return ()
    aggregations: dict[str, tuple[str, str]] = {
        "label": ("_group_label", "first"),
        "seconds": ("seconds", "sum"),
    }
    for hint_field, column in hint_columns.items():
        aggregations[hint_field] = (column, "first")
    source = frame.assign(_group_label=frame[label_column])
    grouped = _ranked(source.groupby(key, sort=False).agg(**aggregations).reset_index())

    groups: list[SummaryGroup] = []
    for row in grouped.to_dict(orient="records"):
        hints = None
        if hint_columns:
            hints = SummaryHints(
                **{field: _optional_str(row[field]) for field in hint_columns}
            )
        groups.append(
            SummaryGroup(label=str(row["label"]), seconds=float(row["seconds"]), hints=hints)
        )
    return tuple(groups)


def assign_week_start(
    spent_at: pd.Series,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> pd.Series:
    """Start date of the week containing each timestamp.

    ``week_start_day`` counts from Sunday (0=Sunday ... 6=Saturday).
    """
    days = spent_at.dt.normalize()
    # pandas counts from Monday=0; shift to Sunday=0.
    sunday_based = (days.dt.dayofweek + 1) % 7
    offset = (sunday_based - week_start_day) % 7
    return days - pd.to_timedelta(offset, unit="D")


def week_label(week_start: pd.Timestamp) -> str:
    return f"Week of {week_start.strftime('%b')} {week_start.day}"


def build_weekly_by_user(
    frame: pd.DataFrame,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> tuple[WeeklyUserBucket, ...]:
    dated = frame.dropna(subset=["spent_at"])
    if dated.empty:
        return ()
    dated = dated.assign(week_start=assign_week_start(dated["spent_at"], week_start_day))
    per_user = (
        dated.groupby(["week_start", "user_key"], sort=False)
        .agg(
            seconds=("seconds", "sum"),
            user_id=("user_id", "first"),
            username=("username", "first"),
            label=("user_name", "first"),
        )
        .reset_index()
    )

    buckets: list[WeeklyUserBucket] = []
    for week_start, week_rows in per_user.groupby("week_start", sort=True):
        ranked = _ranked(week_rows)
        buckets.append(
            WeeklyUserBucket(
                week_start=week_start.strftime("%Y-%m-%d"),
                label=week_label(week_start),
                total_seconds=float(ranked["seconds"].sum()),
                totals=tuple(
                    WeeklyUserTotal(
                        user_id=str(row["user_id"]),
                        user_name=str(row["label"]),
                        seconds=float(row["seconds"]),
                        username=_optional_str(row["username"]),
                    )
                    for row in ranked.to_dict(orient="records")
                ),
            )
        )
    return tuple(buckets)


def build_weekly_epic_breakdown(
    frame: pd.DataFrame,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> tuple[WeeklyEpicBucket, ...]:
    dated = frame.dropna(subset=["spent_at"])
    if dated.empty:
        return ()
    dated = dated.assign(week_start=assign_week_start(dated["spent_at"], week_start_day))
    per_epic = (
        dated.groupby(["week_start", "epic"], sort=False)
        .agg(seconds=("seconds", "sum"))
        .reset_index()
        .rename(columns={"epic": "label"})
    )

    buckets: list[WeeklyEpicBucket] = []
    for week_start, week_rows in per_epic.groupby("week_start", sort=True):
        ranked = _ranked(week_rows)
        buckets.append(
            WeeklyEpicBucket(
                week_start=week_start.strftime("%Y-%m-%d"),
                label=week_label(week_start),
                totals=tuple(
                    WeeklyEpicTotal(epic=str(row["label"]), seconds=float(row["seconds"]))
                    for row in ranked.to_dict(orient="records")
                ),
            )
        )
    return tuple(buckets)


def build_report_summary(
    issues: Sequence[Issue],
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> ReportSummary:
    """Derive every summary grouping from the raw timelogs of ``issues``."""
    frame = build_timelog_frame(issues)
    if frame.empty:
        return ReportSummary()

    return ReportSummary(
        total_seconds=float(frame["seconds"].sum()),
        by_user=_summary_groups(
            frame, key="user_key", label_column="user_name", hint_columns={"username": "username"}
        ),
        by_issue=_summary_groups(
            frame,
            key="issue_id",
            label_column="issue_label",
            hint_columns={"issue_url": "issue_url"},
        ),
        by_epic=_summary_groups(
            frame, key="epic", label_column="epic", hint_columns={"epic_url": "epic_url"}
        ),
        by_label=_summary_groups(
            frame.explode("labels"), key="labels", label_column="labels", hint_columns={}
        ),
        by_state=_summary_groups(frame, key="state", label_column="state", hint_columns={}),
        weekly_by_user=build_weekly_by_user(frame, week_start_day),
        weekly_epic_breakdown=build_weekly_epic_breakdown(frame, week_start_day),
    )
