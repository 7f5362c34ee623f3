from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_PRIMARY_PALETTE = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042"]
DEFAULT_TEAM_PALETTE = [
    "#0088FE",
    "#00C49F",
    "#FFBB28",
    "#FF8042",
    "#8884D8",
    "#82CA9D",
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FFEEAD",
    "#D4A5A5",
    "#38bdf8",
    "#fb7185",
    "#facc15",
    "#4ade80",
    "#a855f7",
    "#f97316",
    "#06b6d4",
    "#ec4899",
    "#eab308",
    "#22c55e",
    "#8b5cf6",
    "#ea580c",
    "#0ea5e9",
    "#f43f5e",
    "#84cc16",
    "#10b981",
    "#7c3aed",
    "#dc2626",
    "#0891b2",
    "#e11d48",
    "#65a30d",
    "#059669",
    "#6366f1",
    "#b91c1c",
    "#0e7490",
    "#be185d",
    "#4d7c0f",
    "#047857",
    "#4f46e5",
    "#991b1b",
]
DEFAULT_HEATMAP_PALETTE = ["#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39"]
DEFAULT_STATE_PALETTE = ["#38bdf8", "#fb7185", "#22d3ee", "#64748b"]

WEEK_START_ENV_VAR = "TIMETRACK_WEEK_START_DAY"


class PaletteConfig(BaseModel):
    primary: list[str] = Field(default_factory=lambda: list(DEFAULT_PRIMARY_PALETTE), min_length=1)
    team: list[str] = Field(default_factory=lambda: list(DEFAULT_TEAM_PALETTE), min_length=1)
    heatmap: list[str] = Field(default_factory=lambda: list(DEFAULT_HEATMAP_PALETTE), min_length=1)
    state: list[str] = Field(default_factory=lambda: list(DEFAULT_STATE_PALETTE), min_length=1)
    estimate: str = "rgba(148, 163, 184, 0.8)"
    spent: str = "#38bdf8"
    over_budget: str = "#fb7185"
    commit_stroke: str = "#10b981"
    commit_fill: str = "rgba(16, 185, 129, 0.25)"

    @property
    def categorical(self) -> list[str]:
        """Primary colors followed by the team roster, used for labels and epics."""
        return [*self.primary, *self.team]


class CurveConfig(BaseModel):
    padding_top: float = Field(default=10.0, ge=0.0, lt=100.0)
    padding_bottom: float = Field(default=15.0, ge=0.0, lt=100.0)
    max_axis_labels: int = Field(default=7, ge=1)

    @model_validator(mode="after")
    def _check_usable_height(self) -> CurveConfig:
        if self.padding_top + self.padding_bottom >= 100.0:
            raise ValueError("curve padding_top + padding_bottom must be < 100")
        return self


class StackedConfig(BaseModel):
    min_width: float = Field(default=20.0, ge=0.0, le=100.0)
    max_width: float = Field(default=100.0, gt=0.0, le=100.0)
    segment_weight_floor: float = Field(default=0.15, ge=0.0)
    label_threshold_percent: float = Field(default=12.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def _check_width_range(self) -> StackedConfig:
        if self.min_width > self.max_width:
            raise ValueError("stacked min_width must be <= max_width")
        return self


class BarsConfig(BaseModel):
    min_bar_percent: float = Field(default=2.0, ge=0.0, le=100.0)
    contributor_max_bars: int = Field(default=6, ge=1)
    issue_max_bars: int = Field(default=8, ge=1)
    estimate_max_bars: int = Field(default=8, ge=1)


class SelectionConfig(BaseModel):
    seed_size: int = Field(default=4, ge=1)


class DisplayConfig(BaseModel):
    decimals: int = Field(default=1, ge=0, le=6)
    value_label: str = "h"
    # 0=Sunday ... 6=Saturday.
    week_start_day: int = Field(default=1, ge=0, le=6)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    palettes: PaletteConfig = Field(default_factory=PaletteConfig)
    curve: CurveConfig = Field(default_factory=CurveConfig)
    stacked: StackedConfig = Field(default_factory=StackedConfig)
    bars: BarsConfig = Field(default_factory=BarsConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path | None) -> AppConfig:
    data: dict = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)

    env_week_start = os.getenv(WEEK_START_ENV_VAR)
    if env_week_start:
        try:
            week_start_day = int(env_week_start)
        except ValueError as exc:
            raise ValueError(
                f"{WEEK_START_ENV_VAR} must be an integer from 0 to 6, got {env_week_start!r}"
            ) from exc
        config.display = DisplayConfig.model_validate(
            {**config.display.model_dump(), "week_start_day": week_start_day}
        )
    return config
