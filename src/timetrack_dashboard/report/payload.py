from __future__ import annotations

import logging
import math
from datetime import datetime
from time import perf_counter
from typing import Any

from timetrack_dashboard.config import AppConfig
from timetrack_dashboard.features.selection import SelectionState
from timetrack_dashboard.features.series import reduce_summary, seconds_to_hours
from timetrack_dashboard.report.contracts import StackedRow
from timetrack_dashboard.report.formatting import (
    build_summary_cards,
    commit_month_label,
    format_duration,
    format_hours,
)
from timetrack_dashboard.report.models import ProjectTimeReport, SummaryGroup
from timetrack_dashboard.viz.bars import (
    donut_slices,
    estimate_vs_spent_items,
    layout_bars,
    layout_estimate_vs_spent,
)
from timetrack_dashboard.viz.colors import ColorTable
from timetrack_dashboard.viz.curve import axis_label_indices, build_curve
from timetrack_dashboard.viz.stacked import (
    build_epic_focus_rows,
    build_weekly_user_rows,
    layout_stacked,
)

LOGGER = logging.getLogger(__name__)

PAYLOAD_VERSION = 1


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return value


def contributor_key(group: SummaryGroup) -> str:
    """Usernames are stable across charts; display labels may collide or change."""
    if group.hints is not None and group.hints.username is not None:
        return group.hints.username
    return group.label


def build_color_tables(report: ProjectTimeReport, config: AppConfig) -> dict[str, ColorTable]:
    palettes = config.palettes
    summary = report.summary
    return {
        "contributors": ColorTable.from_keys(
            (contributor_key(group) for group in summary.by_user), palettes.team
        ),
        "labels": ColorTable.from_keys(
            (group.label for group in summary.by_label), palettes.categorical
        ),
        "epics": ColorTable.from_keys(
            (group.label for group in summary.by_epic), palettes.categorical
        ),
    }


def _stacked_payload(rows: list[StackedRow], config: AppConfig) -> dict[str, Any]:
    stacked = config.stacked
    return layout_stacked(
        rows,
        min_width=stacked.min_width,
        max_width=stacked.max_width,
        weight_floor=stacked.segment_weight_floor,
        label_threshold=stacked.label_threshold_percent,
    ).to_dict()


def _commit_activity_payload(report: ProjectTimeReport, config: AppConfig) -> dict[str, Any]:
    days = report.commit_activity
    geometry = build_curve(
        [day.count for day in days],
        labels=[day.label for day in days],
        padding_top=config.curve.padding_top,
        padding_bottom=config.curve.padding_bottom,
    )
    return {
        **geometry.to_dict(),
        "dates": [day.date for day in days],
        "axis_label_indices": axis_label_indices(len(days), config.curve.max_axis_labels),
        "baseline_y": 100.0 - config.curve.padding_bottom,
        "month_label": commit_month_label(report.commit_range.start),
        "stroke_color": config.palettes.commit_stroke,
        "fill_color": config.palettes.commit_fill,
    }


def _epic_focus_payload(
    report: ProjectTimeReport,
    config: AppConfig,
    selection: SelectionState,
    epic_colors: ColorTable,
) -> dict[str, Any]:
    by_epic = report.summary.by_epic
    selected = selection.observe([group.label for group in by_epic])
    rows = build_epic_focus_rows(report.summary.weekly_epic_breakdown, selected, epic_colors)
    return {
        "options": [
            {
                "label": group.label,
                "hours": seconds_to_hours(group.seconds),
                "selected": group.label in selection,
            }
            for group in by_epic
        ],
        "selected": selected,
        **_stacked_payload(rows, config),
    }


def _issue_breakdown(report: ProjectTimeReport, decimals: int = 2) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for issue in report.issues:
        spent = issue.spent_seconds
        estimate = issue.time_estimate
        rows.append(
            {
                "id": issue.id,
                "label": issue.display_label,
                "url": issue.web_url,
                "epic": issue.epic.display_label if issue.epic else "No epic",
                "entries": len(issue.timelogs),
                "estimate": (
                    f"{format_hours(seconds_to_hours(estimate), decimals)} "
                    f"({format_duration(estimate)})"
                    if estimate > 0
                    else None
                ),
                "tracked": (
                    f"{format_hours(seconds_to_hours(spent), decimals)} "
                    f"({format_duration(spent)})"
                ),
            }
        )
    return rows


def build_dashboard_payload(
    report: ProjectTimeReport,
    config: AppConfig,
    selection: SelectionState | None = None,
) -> dict[str, Any]:
    """Every chart dataset of the dashboard as one JSON-safe dict.

    ``selection`` is owned by the caller so epic toggles survive rebuilds; it is
    reseeded here only when the report's epic set changed.
    """
    started = perf_counter()
    if selection is None:
        selection = SelectionState(seed_size=config.selection.seed_size)

    palettes = config.palettes
    bars = config.bars
    summary = report.summary
    color_tables = build_color_tables(report, config)

    weekly_rows = build_weekly_user_rows(summary.weekly_by_user, color_tables["contributors"])
    estimate_items = estimate_vs_spent_items(report.issues, limit=bars.estimate_max_bars)

    payload = {
        "version": PAYLOAD_VERSION,
        "project": {
            "name": report.project.name,
            "path": report.project.path,
            "web_url": report.project.web_url,
        },
        "generated_at": report.generated_at,
        "range": {"from": report.range.start, "to": report.range.end},
        "summary_cards": build_summary_cards(report, decimals=config.display.decimals),
        "warnings": list(report.warnings),
        "colors": {name: table.as_dict() for name, table in color_tables.items()},
        "contributors": [
            bar.to_dict()
            for bar in layout_bars(
                reduce_summary(summary.by_user),
                max_bars=bars.contributor_max_bars,
                min_percent=bars.min_bar_percent,
            )
        ],
        "weekly_by_contributor": _stacked_payload(weekly_rows, config),
        "commit_activity": _commit_activity_payload(report, config),
        "issue_workflow": [
            item.to_dict() for item in donut_slices(reduce_summary(summary.by_state), palettes.state)
        ],
        "estimate_vs_actual": [
            item.to_dict()
            for item in layout_estimate_vs_spent(
                estimate_items,
                max_bars=bars.estimate_max_bars,
                min_percent=bars.min_bar_percent,
                estimate_color=palettes.estimate,
                spent_color=palettes.spent,
                over_budget_color=palettes.over_budget,
            )
        ],
        "epic_distribution": [
            item.to_dict()
            for item in donut_slices(reduce_summary(summary.by_epic), palettes.primary)
        ],
        "top_issues": [
            bar.to_dict()
            for bar in layout_bars(
                reduce_summary(summary.by_issue),
                max_bars=bars.issue_max_bars,
                min_percent=bars.min_bar_percent,
            )
        ],
        "epic_focus": _epic_focus_payload(report, config, selection, color_tables["epics"]),
        "issue_breakdown": _issue_breakdown(report),
        "display": {
            "decimals": config.display.decimals,
            "value_label": config.display.value_label,
            "heatmap_palette": list(palettes.heatmap),
        },
    }
    LOGGER.debug(
        "Built dashboard payload for %s in %.3f ms",
        report.project.name,
        (perf_counter() - started) * 1000.0,
    )
    return _json_safe(payload)
