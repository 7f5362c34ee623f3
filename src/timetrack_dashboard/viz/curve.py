from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from timetrack_dashboard.report.contracts import CurveSample, PathCommand
from timetrack_dashboard.viz.scaling import max_with_floor

CANVAS_SIZE = 100.0
DEFAULT_PADDING_TOP = 10.0
DEFAULT_PADDING_BOTTOM = 15.0
DEFAULT_MAX_AXIS_LABELS = 7


def _format_number(value: float) -> str:
    # +0.0 folds -0.0 into 0.0 so paths never print "-0".
    return f"{round(value, 4) + 0.0:g}"


def format_path(commands: Sequence[PathCommand]) -> str:
    parts: list[str] = []
    for command in commands:
        parts.append(" ".join([command.op, *(_format_number(c) for c in command.coords)]))
    return " ".join(parts)


@dataclass(frozen=True)
class CurveGeometry:
    points: tuple[CurveSample, ...]
    fill_commands: tuple[PathCommand, ...]
    line_commands: tuple[PathCommand, ...]
    max_value: float

    @property
    def fill_path(self) -> str:
        return format_path(self.fill_commands)

    @property
    def line_path(self) -> str:
        return format_path(self.line_commands)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def total(self) -> float:
        return sum(point.value for point in self.points)

    @property
    def peak(self) -> float:
        return self.max_value

    @property
    def average(self) -> float:
        if not self.points:
            return 0.0
        return self.total / len(self.points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": [point.to_dict() for point in self.points],
            "fill_path": self.fill_path,
            "line_path": self.line_path,
            "max_value": self.max_value,
            "total": self.total,
            "peak": self.peak,
            "average": self.average,
        }


def _fill_commands(points: Sequence[CurveSample]) -> list[PathCommand]:
    first, last = points[0], points[-1]
    return [
        PathCommand("M", (0.0, CANVAS_SIZE)),
        PathCommand("L", (0.0, first.y)),
        *(PathCommand("L", (point.x, point.y)) for point in points),
        PathCommand("L", (CANVAS_SIZE, last.y)),
        PathCommand("L", (CANVAS_SIZE, CANVAS_SIZE)),
        PathCommand("Z"),
    ]


def _straight_line_commands(points: Sequence[CurveSample]) -> list[PathCommand]:
    first = points[0]
    return [
        PathCommand("M", (first.x, first.y)),
        *(PathCommand("L", (point.x, point.y)) for point in points[1:]),
    ]


def _smooth_line_commands(points: Sequence[CurveSample]) -> list[PathCommand]:
    """Quadratic segments through successive midpoints, closing on the last sample."""
    first = points[0]
    commands = [PathCommand("M", (first.x, first.y))]
    for prev, curr in zip(points, points[1:]):
        mid_x = (prev.x + curr.x) / 2.0
        mid_y = (prev.y + curr.y) / 2.0
        commands.append(PathCommand("Q", (prev.x, prev.y, mid_x, mid_y)))
    second_last, last = points[-2], points[-1]
    commands.append(PathCommand("Q", (second_last.x, second_last.y, last.x, last.y)))
    return commands


def build_curve(
    samples: Sequence[float],
    labels: Sequence[str] | None = None,
    padding_top: float = DEFAULT_PADDING_TOP,
    padding_bottom: float = DEFAULT_PADDING_BOTTOM,
) -> CurveGeometry:
    """Place ``samples`` on the normalized canvas and build the line and fill paths.

    The maximum is floored at 1 so an all-zero series sits on the baseline
    (``y = 100 - padding_bottom``) instead of dividing by zero. A single sample is
    centred at ``x = 50``.
    """
    max_value = float(max_with_floor(samples, 1))
    if not samples:
        return CurveGeometry(points=(), fill_commands=(), line_commands=(), max_value=max_value)

    count = len(samples)
    usable_height = CANVAS_SIZE - padding_top - padding_bottom
    step = CANVAS_SIZE / (count - 1) if count > 1 else 0.0

    points: list[CurveSample] = []
    for index, value in enumerate(samples):
        x = CANVAS_SIZE / 2.0 if count == 1 else index * step
        y = CANVAS_SIZE - padding_bottom - (value / max_value) * usable_height
        label = labels[index] if labels is not None and index < len(labels) else str(index)
        points.append(
            CurveSample(x=x, y=y, label=label, value=value, is_zero_value=value == 0)
        )

    line_commands = (
        _smooth_line_commands(points) if count > 2 else _straight_line_commands(points)
    )
    return CurveGeometry(
        points=tuple(points),
        fill_commands=tuple(_fill_commands(points)),
        line_commands=tuple(line_commands),
        max_value=max_value,
    )


def axis_label_indices(count: int, max_labels: int = DEFAULT_MAX_AXIS_LABELS) -> list[int]:
    """Indices of the axis labels to show so at most about ``max_labels`` appear."""
    if count <= max_labels:
        return list(range(count))
    step = math.ceil(count / max_labels)
    return [index for index in range(count) if index % step == 0]
