from __future__ import annotations

from datetime import datetime
from typing import Any

from timetrack_dashboard.features.series import seconds_to_hours
from timetrack_dashboard.report.models import ProjectTimeReport


def format_duration(seconds: float) -> str:
    """Compact ``"3h 05m"`` style duration; sub-minute remainders are dropped."""
    total_minutes = int(max(seconds, 0) // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours and minutes:
        return f"{hours}h {minutes:02d}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"


def format_hours(hours: float, decimals: int = 1, unit: str = "h") -> str:
    return f"{hours:.{decimals}f}{unit}"


def commit_month_label(start: datetime | None) -> str | None:
    if start is None:
        return None
    return start.strftime("%B %Y")


def build_summary_cards(report: ProjectTimeReport, decimals: int = 1) -> list[dict[str, Any]]:
    total_seconds = report.summary.total_seconds
    cards: list[dict[str, Any]] = [
        {
            "title": "Tracked time",
            "value": format_hours(seconds_to_hours(total_seconds), decimals),
            "detail": format_duration(total_seconds),
        },
        {
            "title": "Tracked issues",
            "value": str(len(report.issues)),
            "detail": "Includes all issues with timelogs.",
        },
        {
            "title": "Timelog entries",
            "value": str(report.timelog_count),
            "detail": "Sum of individual time entries.",
        },
        {
            "title": "Contributors",
            "value": str(len(report.summary.by_user)),
            "detail": "Distinct users who logged time.",
        },
    ]
    if report.commit_activity:
        cards.append(
            {
                "title": "Commits",
                "value": str(sum(day.count for day in report.commit_activity)),
                "detail": commit_month_label(report.commit_range.start) or "Selected month",
            }
        )
    return cards
