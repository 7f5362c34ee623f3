from __future__ import annotations

import pytest

from timetrack_dashboard.viz.scaling import (
    clamped_width,
    fraction_of_max,
    max_with_floor,
    partition_budget,
    row_width,
)


def test_fraction_of_max_guards_zero_maximum() -> None:
    assert fraction_of_max(3.0, 12.0) == pytest.approx(0.25)
    assert fraction_of_max(3.0, 0.0) == 0.0


def test_clamped_width_never_drops_below_minimum() -> None:
    assert clamped_width(0.5) == pytest.approx(50.0)
    assert clamped_width(0.0) == pytest.approx(2.0)
    assert clamped_width(0.001, min_percent=5.0) == pytest.approx(5.0)


def test_max_with_floor_handles_empty_and_low_values() -> None:
    assert max_with_floor([], 1) == 1
    assert max_with_floor([0, 0], 1) == 1
    assert max_with_floor([4, 9, 2], 1) == 9


def test_partition_budget_is_proportional_and_sums_to_budget() -> None:
    shares = partition_budget([3.0, 1.0, 0.0])
    assert shares == pytest.approx([75.0, 25.0, 0.0])
    assert sum(partition_budget([1.0, 2.0, 3.0], budget=360.0)) == pytest.approx(360.0)


def test_partition_budget_without_weight_returns_zero_shares() -> None:
    assert partition_budget([0.0, 0.0]) == [0.0, 0.0]
    assert partition_budget([]) == []
    assert partition_budget([-2.0, 2.0]) == pytest.approx([0.0, 100.0])


def test_row_width_scales_between_min_and_max() -> None:
    assert row_width(10.0, 10.0) == pytest.approx(100.0)
    assert row_width(5.0, 10.0) == pytest.approx(60.0)
    assert row_width(0.0, 10.0) == pytest.approx(20.0)


def test_row_width_with_zero_maximum_is_full_width() -> None:
    assert row_width(0.0, 0.0) == pytest.approx(100.0)


def test_row_width_is_monotonic_in_total() -> None:
    widths = [row_width(total, 8.0) for total in (0.0, 1.0, 2.5, 4.0, 8.0)]
    assert widths == sorted(widths)
