from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from timetrack_dashboard.features.series import seconds_to_hours
from timetrack_dashboard.report.contracts import (
    LegendEntry,
    PartitionedSegment,
    StackedRow,
    StackedSegment,
)
from timetrack_dashboard.report.models import WeeklyEpicBucket, WeeklyUserBucket
from timetrack_dashboard.viz.colors import ColorTable
from timetrack_dashboard.viz.scaling import (
    DEFAULT_MAX_ROW_WIDTH,
    DEFAULT_MIN_ROW_WIDTH,
    max_with_floor,
    row_width,
)

# Keeps near-zero segments wide enough to see and click.
DEFAULT_SEGMENT_WEIGHT_FLOOR = 0.15
DEFAULT_LABEL_THRESHOLD_PERCENT = 12.0


@dataclass(frozen=True)
class StackedRowLayout:
    label: str
    total: float
    width: float
    segments: tuple[PartitionedSegment, ...]
    id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.total <= 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "total": self.total,
            "width": self.width,
            "segments": [segment.to_dict() for segment in self.segments],
        }


@dataclass(frozen=True)
class StackedLayout:
    rows: tuple[StackedRowLayout, ...]
    legend: tuple[LegendEntry, ...]
    max_total: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "legend": [entry.to_dict() for entry in self.legend],
            "max_total": self.max_total,
        }


def partition_row(
    row: StackedRow,
    weight_floor: float = DEFAULT_SEGMENT_WEIGHT_FLOOR,
    label_threshold: float = DEFAULT_LABEL_THRESHOLD_PERCENT,
) -> list[PartitionedSegment]:
    """Display weights and true percentages for each segment of ``row``.

    The weight is floored so tiny segments stay visible; the percentage keeps the
    real ``value / total`` ratio and only labels wider than ``label_threshold``
    are shown.
    """
    partitioned: list[PartitionedSegment] = []
    for segment in row.segments:
        percent = segment.value / row.total * 100.0 if row.total > 0 else 0.0
        partitioned.append(
            PartitionedSegment(
                label=segment.label,
                key=segment.key,
                value=segment.value,
                color=segment.color,
                weight=max(segment.value, weight_floor),
                percent=percent,
                show_label=percent > label_threshold,
            )
        )
    return partitioned


def legend_entries(rows: Sequence[StackedRow]) -> list[LegendEntry]:
    seen: dict[str, LegendEntry] = {}
    for row in rows:
        for segment in row.segments:
            if segment.key not in seen:
                seen[segment.key] = LegendEntry(
                    key=segment.key, label=segment.label, color=segment.color
                )
    return list(seen.values())


def layout_stacked(
    rows: Sequence[StackedRow],
    min_width: float = DEFAULT_MIN_ROW_WIDTH,
    max_width: float = DEFAULT_MAX_ROW_WIDTH,
    weight_floor: float = DEFAULT_SEGMENT_WEIGHT_FLOOR,
    label_threshold: float = DEFAULT_LABEL_THRESHOLD_PERCENT,
) -> StackedLayout:
    max_total = float(max_with_floor((row.total for row in rows), 0))
    laid_out = tuple(
        StackedRowLayout(
            id=row.id,
            label=row.label,
            total=row.total,
            width=row_width(row.total, max_total, min_width=min_width, max_width=max_width),
            segments=tuple(
                partition_row(row, weight_floor=weight_floor, label_threshold=label_threshold)
            ),
        )
        for row in rows
    )
    return StackedLayout(rows=laid_out, legend=tuple(legend_entries(rows)), max_total=max_total)


def build_weekly_user_rows(
    buckets: Sequence[WeeklyUserBucket],
    color_table: ColorTable,
) -> list[StackedRow]:
    """One row per week, one segment per contributor with tracked time."""
    rows: list[StackedRow] = []
    for bucket in buckets:
        active = [total for total in bucket.totals if total.seconds > 0]
        segments = []
        for index, total in enumerate(active):
            key = total.username or total.user_id
            color = color_table.lookup(key, index)
            segments.append(
                StackedSegment(
                    label=total.user_name,
                    key=key,
                    value=seconds_to_hours(total.seconds),
                    color=color,
                )
            )
        rows.append(
            StackedRow(
                id=bucket.week_start,
                label=bucket.label,
                total=seconds_to_hours(bucket.total_seconds),
                segments=tuple(segments),
            )
        )
    return rows


def build_epic_focus_rows(
    buckets: Sequence[WeeklyEpicBucket],
    selected: Sequence[str],
    color_table: ColorTable,
) -> list[StackedRow]:
    """Weekly rows restricted to the selected epics, in selection order.

    Weeks without time on any selected epic are dropped.
    """
    if not selected:
        return []
    rows: list[StackedRow] = []
    for bucket in buckets:
        segments = []
        for index, epic in enumerate(selected):
            hours = seconds_to_hours(bucket.seconds_for(epic))
            if hours <= 0:
                continue
            segments.append(
                StackedSegment(
                    label=epic,
                    key=epic,
                    value=hours,
                    color=color_table.lookup(epic, index),
                )
            )
        total = sum(segment.value for segment in segments)
        if not segments or total == 0:
            continue
        rows.append(
            StackedRow(
                id=bucket.week_start,
                label=bucket.label,
                total=total,
                segments=tuple(segments),
            )
        )
    return rows
