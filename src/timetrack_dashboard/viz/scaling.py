from __future__ import annotations

from collections.abc import Iterable, Sequence

DEFAULT_MIN_BAR_PERCENT = 2.0
DEFAULT_MIN_ROW_WIDTH = 20.0
DEFAULT_MAX_ROW_WIDTH = 100.0


def max_with_floor(values: Iterable[float], floor: float) -> float:
    return max([*values, floor])


def fraction_of_max(value: float, max_value: float) -> float:
    if max_value <= 0:
        return 0.0
    return value / max_value


def clamped_width(fraction: float, min_percent: float = DEFAULT_MIN_BAR_PERCENT) -> float:
    """Bar width in percent, never narrower than ``min_percent``."""
    return max(fraction * 100.0, min_percent)


def partition_budget(weights: Sequence[float], budget: float = 100.0) -> list[float]:
    """Split ``budget`` among ``weights`` proportionally.

    Negative weights count as zero. When nothing carries weight every share is zero.
    """
    clipped = [max(weight, 0.0) for weight in weights]
    total = sum(clipped)
    if total <= 0:
        return [0.0 for _ in clipped]
    return [budget * weight / total for weight in clipped]


def row_width(
    total: float,
    max_total: float,
    min_width: float = DEFAULT_MIN_ROW_WIDTH,
    max_width: float = DEFAULT_MAX_ROW_WIDTH,
) -> float:
    if max_total <= 0:
        return max_width
    return min_width + (max_width - min_width) * (total / max_total)
