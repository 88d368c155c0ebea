"""Change detection against recorded fingerprints."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from touchdeps.fingerprint import DEFAULT_CHUNK_SIZE, fingerprint_file
from touchdeps.parse.changes import COLUMNS

LOGGER = logging.getLogger(__name__)

DETECTION_COLUMNS = ["path", "recorded", "current", "status", "changed"]

UNCHANGED = "unchanged"
CHANGED = "changed"
NEW = "new"
MISSING = "missing"


def detect_changes(
    records: pd.DataFrame,
    candidates: Sequence[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    treat_new_as_changed: bool = True,
) -> pd.DataFrame:
    """Compare each candidate's current fingerprint with its recorded one.

    Candidates that no longer exist are reported as ``missing`` and are never
    flagged as changed. Candidates without a record are ``new``; whether they
    count as changed follows `treat_new_as_changed`.
    """

    recorded = dict(zip(records["path"], records["fingerprint"])) if not records.empty else {}

    rows: list[dict[str, object]] = []
    for candidate in candidates:
        path = Path(candidate)
        previous = recorded.get(candidate)
        if not path.is_file():
            LOGGER.warning("Candidate %s does not exist or is not a file; skipping", candidate)
            rows.append(_row(candidate, previous, None, MISSING, False))
            continue

        current = fingerprint_file(path, chunk_size=chunk_size)
        if previous is None:
            rows.append(_row(candidate, None, current, NEW, treat_new_as_changed))
        elif previous != current:
            rows.append(_row(candidate, previous, current, CHANGED, True))
        else:
            rows.append(_row(candidate, previous, current, UNCHANGED, False))

    frame = pd.DataFrame(rows, columns=DETECTION_COLUMNS)
    frame["changed"] = frame["changed"].astype(bool)
    LOGGER.info(
        "Checked %s candidates: %s changed, %s new, %s missing",
        len(frame),
        int((frame["status"] == CHANGED).sum()),
        int((frame["status"] == NEW).sum()),
        int((frame["status"] == MISSING).sum()),
    )
    return frame


def touch_paths(paths: Iterable[str], *, dry_run: bool = False) -> list[str]:
    """Bump the modification time of each path, returning those handled."""

    touched: list[str] = []
    for item in paths:
        if dry_run:
            LOGGER.info("Would touch %s", item)
        else:
            Path(item).touch(exist_ok=True)
            LOGGER.info("Touched %s", item)
        touched.append(item)
    return touched


def merge_records(records: pd.DataFrame, detections: pd.DataFrame) -> pd.DataFrame:
    """Fold current fingerprints from `detections` into `records`.

    Missing candidates keep their existing record.
    """

    fresh = detections.loc[detections["current"].notna(), ["current", "path"]]
    fresh = fresh.rename(columns={"current": "fingerprint"})[COLUMNS]
    if records.empty:
        return fresh.reset_index(drop=True)
    if fresh.empty:
        return records[COLUMNS].reset_index(drop=True)
    combined = pd.concat([records[COLUMNS], fresh], ignore_index=True)
    return combined.drop_duplicates(subset="path", keep="last").reset_index(drop=True)


def _row(
    path: str, recorded: str | None, current: str | None, status: str, changed: bool
) -> dict[str, object]:
    return {"path": path, "recorded": recorded, "current": current, "status": status, "changed": changed}


__all__ = [
    "CHANGED",
    "DETECTION_COLUMNS",
    "MISSING",
    "NEW",
    "UNCHANGED",
    "detect_changes",
    "merge_records",
    "touch_paths",
]
