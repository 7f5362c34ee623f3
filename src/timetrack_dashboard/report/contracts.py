from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

PathOp = Literal["M", "L", "Q", "Z"]


@dataclass(slots=True, frozen=True)
class ChartPoint:
    label: str
    value: float
    hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value, "hint": self.hint}


@dataclass(slots=True, frozen=True)
class CurveSample:
    """One plotted sample on the 0-100 canvas; ``y`` grows downwards."""

    x: float
    y: float
    label: str
    value: float
    is_zero_value: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "label": self.label,
            "value": self.value,
            "is_zero_value": self.is_zero_value,
        }


@dataclass(slots=True, frozen=True)
class PathCommand:
    op: PathOp
    coords: tuple[float, ...] = ()


@dataclass(slots=True, frozen=True)
class StackedSegment:
    label: str
    key: str
    value: float
    color: str


@dataclass(slots=True, frozen=True)
class StackedRow:
    label: str
    total: float
    segments: tuple[StackedSegment, ...] = ()
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))


@dataclass(slots=True, frozen=True)
class PartitionedSegment:
    label: str
    key: str
    value: float
    color: str
    weight: float
    percent: float
    show_label: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "key": self.key,
            "value": self.value,
            "color": self.color,
            "weight": self.weight,
            "percent": self.percent,
            "show_label": self.show_label,
        }


@dataclass(slots=True, frozen=True)
class LegendEntry:
    key: str
    label: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "label": self.label, "color": self.color}
