"""Run report helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Mapping


def write_report(payload: Mapping[str, Any], *, root: Path) -> Path:
    """Write a JSON report under root/run_reports with a timestamped name."""

    reports_dir = Path(root) / "run_reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
    dest = reports_dir / f"run_{timestamp}.json"
    dest.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return dest


__all__ = ["write_report"]
