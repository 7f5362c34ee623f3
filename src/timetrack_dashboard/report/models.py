from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime


def _ensure_seconds(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be finite and >= 0, got {value!r}.")


@dataclass(slots=True, frozen=True)
class ProjectInfo:
    name: str
    path: str | None = None
    web_url: str | None = None


@dataclass(slots=True, frozen=True)
class DateRange:
    start: datetime | None = None
    end: datetime | None = None


@dataclass(slots=True, frozen=True)
class TimelogUser:
    id: str
    username: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.id


@dataclass(slots=True, frozen=True)
class Timelog:
    seconds: float
    user: TimelogUser
    spent_at: datetime | None = None

    def __post_init__(self) -> None:
        _ensure_seconds("timelog seconds", self.seconds)


@dataclass(slots=True, frozen=True)
class EpicRef:
    title: str
    iid: str | None = None
    web_url: str | None = None

    @property
    def display_label(self) -> str:
        return f"{self.title} ({self.iid or ''})"


@dataclass(slots=True, frozen=True)
class Issue:
    id: str
    iid: str
    title: str
    web_url: str | None = None
    state: str = "opened"
    time_estimate: float = 0.0
    epic: EpicRef | None = None
    labels: tuple[str, ...] = ()
    timelogs: tuple[Timelog, ...] = ()

    def __post_init__(self) -> None:
        _ensure_seconds("time_estimate", self.time_estimate)
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "timelogs", tuple(self.timelogs))

    @property
    def spent_seconds(self) -> float:
        return sum(log.seconds for log in self.timelogs)

    @property
    def display_label(self) -> str:
        return f"#{self.iid} {self.title}"


@dataclass(slots=True, frozen=True)
class SummaryHints:
    username: str | None = None
    issue_url: str | None = None
    epic_url: str | None = None


@dataclass(slots=True, frozen=True)
class SummaryGroup:
    """Tracked seconds aggregated for one user, issue, epic, label or state."""

    label: str
    seconds: float
    hints: SummaryHints | None = None

    def __post_init__(self) -> None:
        _ensure_seconds(f"seconds for {self.label!r}", self.seconds)


@dataclass(slots=True, frozen=True)
class WeeklyUserTotal:
    user_id: str
    user_name: str
    seconds: float
    username: str | None = None

    def __post_init__(self) -> None:
        _ensure_seconds("weekly user seconds", self.seconds)


@dataclass(slots=True, frozen=True)
class WeeklyUserBucket:
    week_start: str
    label: str
    total_seconds: float
    totals: tuple[WeeklyUserTotal, ...] = ()

    def __post_init__(self) -> None:
        _ensure_seconds("weekly total_seconds", self.total_seconds)
        object.__setattr__(self, "totals", tuple(self.totals))


@dataclass(slots=True, frozen=True)
class WeeklyEpicTotal:
    epic: str
    seconds: float

    def __post_init__(self) -> None:
        _ensure_seconds("weekly epic seconds", self.seconds)


@dataclass(slots=True, frozen=True)
class WeeklyEpicBucket:
    week_start: str
    label: str
    totals: tuple[WeeklyEpicTotal, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "totals", tuple(self.totals))

    def seconds_for(self, epic: str) -> float:
        for entry in self.totals:
            if entry.epic == epic:
                return entry.seconds
        return 0.0


@dataclass(slots=True, frozen=True)
class ReportSummary:
    total_seconds: float = 0.0
    by_user: tuple[SummaryGroup, ...] = ()
    by_issue: tuple[SummaryGroup, ...] = ()
    by_epic: tuple[SummaryGroup, ...] = ()
    by_label: tuple[SummaryGroup, ...] = ()
    by_state: tuple[SummaryGroup, ...] = ()
    weekly_by_user: tuple[WeeklyUserBucket, ...] = ()
    weekly_epic_breakdown: tuple[WeeklyEpicBucket, ...] = ()

    def __post_init__(self) -> None:
        _ensure_seconds("summary total_seconds", self.total_seconds)
        for name in (
            "by_user",
            "by_issue",
            "by_epic",
            "by_label",
            "by_state",
            "weekly_by_user",
            "weekly_epic_breakdown",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(slots=True, frozen=True)
class CommitDay:
    date: str
    count: int
    label: str

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"commit count must be >= 0, got {self.count!r}.")


@dataclass(slots=True, frozen=True)
class ProjectTimeReport:
    project: ProjectInfo
    summary: ReportSummary
    issues: tuple[Issue, ...] = ()
    generated_at: datetime | None = None
    range: DateRange = field(default_factory=DateRange)
    commit_range: DateRange = field(default_factory=DateRange)
    commit_activity: tuple[CommitDay, ...] = ()
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "commit_activity", tuple(self.commit_activity))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def timelog_count(self) -> int:
        return sum(len(issue.timelogs) for issue in self.issues)
