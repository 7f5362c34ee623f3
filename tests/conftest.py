from __future__ import annotations

from typing import Any

import pytest


def _timelog(username: str, name: str, seconds: int, spent_at: str) -> dict[str, Any]:
    return {
        "seconds": seconds,
        "spentAt": spent_at,
        "user": {"id": f"gid://user/{username}", "username": username, "name": name},
    }


@pytest.fixture
def report_payload() -> dict[str, Any]:
    return {
        "project": {
            "name": "Time Tracker",
            "fullPath": "group/time-tracker",
            "webUrl": "https://gitlab.example.com/group/time-tracker",
        },
        "generatedAt": "2026-10-17T09:00:00Z",
        "range": {"from": "2026-10-06T00:00:00Z", "to": "2026-10-20T00:00:00Z"},
        "commitRange": {"from": "2026-10-01T00:00:00Z", "to": "2026-11-01T00:00:00Z"},
        "issues": [
            {
                "id": "gid://issue/1",
                "iid": 1,
                "title": "Login form",
                "webUrl": "https://gitlab.example.com/group/time-tracker/-/issues/1",
                "state": "closed",
                "timeEstimate": 7200,
                "epic": {"title": "Auth", "iid": "3", "webUrl": "https://gitlab.example.com/epics/3"},
                "labels": ["frontend"],
                "timelogs": [
                    _timelog("alice", "Alice A.", 5400, "2026-10-07T10:00:00Z"),
                    _timelog("bob", "Bob B.", 3600, "2026-10-14T10:00:00Z"),
                ],
            },
            {
                "id": "gid://issue/2",
                "iid": 2,
                "title": "Token refresh",
                "webUrl": "https://gitlab.example.com/group/time-tracker/-/issues/2",
                "state": "opened",
                "timeEstimate": 3600,
                "epic": {"title": "Auth", "iid": "3"},
                "labels": {"nodes": [{"title": "backend"}]},
                "timelogs": [
                    _timelog("alice", "Alice A.", 7200, "2026-10-15T08:00:00Z"),
                ],
            },
            {
                "id": "gid://issue/3",
                "iid": 3,
                "title": "Reports page",
                "webUrl": "https://gitlab.example.com/group/time-tracker/-/issues/3",
                "state": "opened",
                "timeEstimate": 0,
                "epic": {"title": "Reporting", "iid": "4"},
                "labels": [],
                "timelogs": [
                    _timelog("carol", "Carol C.", 1800, "2026-10-16T12:00:00Z"),
                ],
            },
            {
                "id": "gid://issue/4",
                "iid": 4,
                "title": "Backlog idea",
                "state": "opened",
                "timelogs": [],
            },
        ],
        "commitActivity": [
            {"date": "2026-10-01", "count": 0, "label": "Oct 1"},
            {"date": "2026-10-02", "count": 3, "label": "Oct 2"},
            {"date": "2026-10-03", "count": 6, "label": "Oct 3"},
        ],
        "warnings": ["Some timelogs were outside the selected range."],
    }
