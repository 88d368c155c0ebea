"""Command-line entry points for touchdeps."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from touchdeps.config import ConfigError, TouchdepsConfig, dump_example_config, load_config
from touchdeps.fingerprint import fingerprint_file
from touchdeps.parse.changes import (
    ChangeFileError,
    empty_records,
    parse_candidates,
    read_change_file,
    write_change_file,
)
from touchdeps.services.detect import detect_changes, merge_records, touch_paths
from touchdeps.util.logging import configure_logging
from touchdeps.util.report import write_report

app = typer.Typer(
    add_completion=False,
    help="Touch files read from stdin that have changed according to a change file.",
)


def _load(config_path: Optional[Path], **overrides: object) -> TouchdepsConfig:
    try:
        cfg = load_config(config_path, overrides={k: v for k, v in overrides.items() if v is not None})
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    configure_logging(log_path=cfg.runtime.log_path)
    return cfg


def _read_records(change_file: Path, cfg: TouchdepsConfig, *, required: bool):
    if not change_file.exists():
        if required:
            typer.echo(f"Change file {change_file} does not exist.", err=True)
            raise typer.Exit(code=1)
        return empty_records()
    try:
        return read_change_file(change_file, comment_prefix=cfg.change_file.comment_prefix)
    except ChangeFileError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def check(
    change_file: Path = typer.Argument(..., help="File of '<fingerprint> <path>' records"),
    dry_run: Optional[bool] = typer.Option(None, "--dry-run/--touch", help="Only report, do not touch"),
    update: bool = typer.Option(False, "--update", help="Rewrite the change file with current fingerprints"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
) -> None:
    """Touch candidate paths from stdin whose content no longer matches the change file."""

    cfg = _load(config, **{"runtime.dry_run": dry_run})
    logger = logging.getLogger("touchdeps.cli")
    records = _read_records(change_file, cfg, required=True)
    candidates = parse_candidates(sys.stdin.read())

    detections = detect_changes(
        records,
        candidates,
        chunk_size=cfg.fingerprint.chunk_size,
        treat_new_as_changed=cfg.runtime.treat_new_as_changed,
    )
    changed = detections.loc[detections["changed"], "path"].tolist()
    for path in changed:
        typer.echo(path)
    touch_paths(changed, dry_run=cfg.runtime.dry_run)

    if update:
        merged = merge_records(records, detections)
        write_change_file(merged, change_file, sort_records=cfg.change_file.sort_records)
        logger.info("Updated %s with %s records", change_file, len(merged))

    if cfg.runtime.report_dir:
        dest = write_report(
            {
                "step": "check",
                "change_file": str(change_file),
                "dry_run": cfg.runtime.dry_run,
                "candidates": len(candidates),
                "changed": changed,
                "status_counts": {
                    status: int(count) for status, count in detections["status"].value_counts().items()
                },
            },
            root=cfg.runtime.report_dir,
        )
        logger.info("Wrote report %s", dest)


@app.command()
def record(
    change_file: Path = typer.Argument(..., help="Change file to create or update"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file (YAML/TOML/JSON)"),
) -> None:
    """Fingerprint candidate paths from stdin and store them in the change file."""

    cfg = _load(config)
    logger = logging.getLogger("touchdeps.cli")
    records = _read_records(change_file, cfg, required=False)
    candidates = parse_candidates(sys.stdin.read())

    detections = detect_changes(
        records,
        candidates,
        chunk_size=cfg.fingerprint.chunk_size,
        treat_new_as_changed=True,
    )
    merged = merge_records(records, detections)
    write_change_file(merged, change_file, sort_records=cfg.change_file.sort_records)
    logger.info("Recorded %s fingerprints into %s", int(detections["current"].notna().sum()), change_file)


@app.command()
def fingerprint(
    files: List[Path] = typer.Argument(..., help="Files to fingerprint"),
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Read size in bytes"),
) -> None:
    """Print '<fingerprint> <path>' lines in change-file format."""

    cfg = _load(None, **{"fingerprint.chunk_size": chunk_size})
    failed = False
    for path in files:
        if not path.is_file():
            typer.echo(f"{path}: not a file", err=True)
            failed = True
            continue
        typer.echo(f"{fingerprint_file(path, chunk_size=cfg.fingerprint.chunk_size)} {path}")
    if failed:
        raise typer.Exit(code=1)


@app.command("dump-config")
def dump_config(dest: Path = typer.Argument(..., help="Destination (.yaml or .json)")) -> None:
    """Write the default configuration."""

    try:
        dump_example_config(dest)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
