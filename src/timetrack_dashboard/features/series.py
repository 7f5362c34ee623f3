from __future__ import annotations

from collections.abc import Callable, Sequence

from timetrack_dashboard.report.contracts import ChartPoint
from timetrack_dashboard.report.models import SummaryGroup, SummaryHints

SECONDS_PER_HOUR = 3600.0

HintAccessor = Callable[[SummaryHints], str | None]

# Evaluated in order; the first present value becomes the point hint.
HINT_PRECEDENCE: tuple[HintAccessor, ...] = (
    lambda hints: hints.issue_url,
    lambda hints: hints.epic_url,
    lambda hints: hints.username,
)


def seconds_to_hours(seconds: float) -> float:
    return seconds / SECONDS_PER_HOUR


def pick_hint(
    hints: SummaryHints | None,
    accessors: Sequence[HintAccessor] = HINT_PRECEDENCE,
) -> str | None:
    if hints is None:
        return None
    for accessor in accessors:
        value = accessor(hints)
        if value is not None:
            return value
    return None


def reduce_summary(groups: Sequence[SummaryGroup]) -> list[ChartPoint]:
    """Map summary groups to chart points (hours) without reordering or filtering."""
    return [
        ChartPoint(
            label=group.label,
            value=seconds_to_hours(group.seconds),
            hint=pick_hint(group.hints),
        )
        for group in groups
    ]
