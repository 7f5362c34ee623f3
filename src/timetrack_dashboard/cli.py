from __future__ import annotations

from pathlib import Path

import typer
import yaml

from timetrack_dashboard.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from timetrack_dashboard.logging import configure_logging
from timetrack_dashboard.pipeline.run_all import run_all

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = DEFAULT_CONFIG_PATH
    try:
        return load_config(config_path)
    except (ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


@app.command()
def payload(
    report: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    epic: list[str] = typer.Option(
        [],
        "--epic",
        help="Epic to show in the focus chart; repeat for several. Defaults to the first four.",
    ),
    log_level: str = typer.Option("INFO", help="Logging level."),
) -> None:
    """Build the dashboard chart payload from a fetched report JSON file."""
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    cfg = _load_app_config(config)
    try:
        payload_path = run_all(report_path=report, out_dir=out, config=cfg, selected_epics=epic)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--report") from exc
    typer.echo(f"Payload written to: {payload_path}")


@app.command()
def palettes(
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Print the configured color palettes as YAML."""
    cfg = _load_app_config(config)
    typer.echo(yaml.safe_dump(cfg.palettes.model_dump(), sort_keys=False).rstrip())


if __name__ == "__main__":
    app()
