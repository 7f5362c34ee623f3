from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from timetrack_dashboard.config import AppConfig
from timetrack_dashboard.features.selection import SelectionState
from timetrack_dashboard.io.report_json import load_report
from timetrack_dashboard.io.write import write_payload, write_summary
from timetrack_dashboard.paths import build_output_paths
from timetrack_dashboard.report.payload import build_dashboard_payload

LOGGER = logging.getLogger(__name__)


def run_all(
    report_path: Path,
    out_dir: Path,
    config: AppConfig,
    *,
    selected_epics: Iterable[str] = (),
) -> Path:
    report = load_report(report_path, week_start_day=config.display.week_start_day)
    selection = SelectionState(selected_epics, seed_size=config.selection.seed_size)
    payload = build_dashboard_payload(report, config, selection=selection)

    paths = build_output_paths(out_dir)
    payload_path = write_payload(payload, paths.payload / "dashboard.json")
    write_summary(
        {
            "project": report.project.name,
            "issues": len(report.issues),
            "timelogs": report.timelog_count,
            "contributors": len(report.summary.by_user),
            "selected_epics": payload["epic_focus"]["selected"],
            "warnings": len(report.warnings),
        },
        paths.summary / "run_summary.json",
    )
    LOGGER.info("Dashboard payload written to %s", payload_path)
    return payload_path
