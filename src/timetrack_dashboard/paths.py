from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    payload: Path
    summary: Path


def build_output_paths(out_dir: Path) -> OutputPaths:
    paths = OutputPaths(
        root=out_dir,
        payload=out_dir / "payload",
        summary=out_dir / "summary",
    )
    for path in (paths.root, paths.payload, paths.summary):
        path.mkdir(parents=True, exist_ok=True)
    return paths
