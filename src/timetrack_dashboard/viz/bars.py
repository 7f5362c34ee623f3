from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from timetrack_dashboard.features.ranking import DEFAULT_TOP_N, rank_issues, top_n
from timetrack_dashboard.features.series import seconds_to_hours
from timetrack_dashboard.report.contracts import ChartPoint
from timetrack_dashboard.report.models import Issue
from timetrack_dashboard.viz.colors import color_for
from timetrack_dashboard.viz.scaling import (
    DEFAULT_MIN_BAR_PERCENT,
    clamped_width,
    fraction_of_max,
    max_with_floor,
    partition_budget,
)

ESTIMATE_COLOR = "rgba(148, 163, 184, 0.8)"
SPENT_COLOR = "#38bdf8"
OVER_BUDGET_COLOR = "#fb7185"


@dataclass(frozen=True)
class BarLayout:
    label: str
    value: float
    width: float
    hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value, "width": self.width, "hint": self.hint}


@dataclass(frozen=True)
class EstimateVsSpent:
    label: str
    estimated: float
    spent: float
    hint: str | None = None

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.estimated and self.estimated > 0


@dataclass(frozen=True)
class EstimateVsSpentLayout:
    item: EstimateVsSpent
    estimated_width: float
    spent_width: float
    spent_color: str
    estimate_color: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.item.label,
            "hint": self.item.hint,
            "estimated": self.item.estimated,
            "spent": self.item.spent,
            "estimated_width": self.estimated_width,
            "spent_width": self.spent_width,
            "estimate_color": self.estimate_color,
            "spent_color": self.spent_color,
            "over_budget": self.item.is_over_budget,
        }


@dataclass(frozen=True)
class DonutSlice:
    label: str
    value: float
    share: float
    color: str
    hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "share": self.share,
            "color": self.color,
            "hint": self.hint,
        }


def layout_bars(
    points: Sequence[ChartPoint],
    max_bars: int | None = DEFAULT_TOP_N,
    min_percent: float = DEFAULT_MIN_BAR_PERCENT,
) -> list[BarLayout]:
    shown = top_n(points, max_bars)
    max_value = max_with_floor((point.value for point in shown), 0)
    return [
        BarLayout(
            label=point.label,
            value=point.value,
            width=clamped_width(fraction_of_max(point.value, max_value), min_percent),
            hint=point.hint,
        )
        for point in shown
    ]


def estimate_vs_spent_items(
    issues: Sequence[Issue],
    limit: int | None = DEFAULT_TOP_N,
) -> list[EstimateVsSpent]:
    """Most active issues with their estimate and tracked time in hours."""
    return [
        EstimateVsSpent(
            label=issue.display_label,
            estimated=seconds_to_hours(issue.time_estimate),
            spent=seconds_to_hours(issue.spent_seconds),
            hint=issue.web_url,
        )
        for issue in rank_issues(issues, limit=limit)
    ]


def layout_estimate_vs_spent(
    items: Sequence[EstimateVsSpent],
    max_bars: int | None = DEFAULT_TOP_N,
    min_percent: float = DEFAULT_MIN_BAR_PERCENT,
    estimate_color: str = ESTIMATE_COLOR,
    spent_color: str = SPENT_COLOR,
    over_budget_color: str = OVER_BUDGET_COLOR,
) -> list[EstimateVsSpentLayout]:
    """Paired bars scaled against the largest estimate or spent value shown."""
    shown = top_n(items, max_bars)
    max_value = max_with_floor(
        [value for item in shown for value in (item.estimated, item.spent)], 0
    )
    return [
        EstimateVsSpentLayout(
            item=item,
            estimated_width=clamped_width(fraction_of_max(item.estimated, max_value), min_percent),
            spent_width=clamped_width(fraction_of_max(item.spent, max_value), min_percent),
            spent_color=over_budget_color if item.is_over_budget else spent_color,
            estimate_color=estimate_color,
        )
        for item in shown
    ]


def donut_slices(points: Sequence[ChartPoint], palette: Sequence[str]) -> list[DonutSlice]:
    shares = partition_budget([point.value for point in points], budget=100.0)
    return [
        DonutSlice(
            label=point.label,
            value=point.value,
            share=share,
            color=color_for(point.label, index, palette),
            hint=point.hint,
        )
        for index, (point, share) in enumerate(zip(points, shares))
    ]
