"""Change-file and candidate-list parsing.

A change file holds one ``<fingerprint><whitespace><path>`` record per line.
Blank lines and lines starting with the comment prefix are ignored.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pandas as pd

from touchdeps.fingerprint import FINGERPRINT_LENGTH

LOGGER = logging.getLogger(__name__)

COLUMNS = ["fingerprint", "path"]

_FINGERPRINT_RE = re.compile(r"[A-Za-z0-9+/]*={0,2}")


class ChangeFileError(ValueError):
    """Raised when a change file contains malformed records."""


def empty_records() -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype="object") for col in COLUMNS})


def read_change_file(path: Path, *, comment_prefix: str = "#") -> pd.DataFrame:
    """Load change records into a ``[fingerprint, path]`` frame.

    When a path appears more than once the last record wins.
    """

    if not path.exists():
        raise FileNotFoundError(path)

    rows: list[tuple[str, str]] = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip() or line.lstrip().startswith(comment_prefix):
            continue
        fields = line.split()
        if len(fields) != 2:
            raise ChangeFileError(
                f"{path}: line {lineno} must have exactly two fields, got {len(fields)}."
            )
        fingerprint, target = fields
        _validate_fingerprint(fingerprint, source=f"{path}: line {lineno}")
        rows.append((fingerprint, target))

    if not rows:
        return empty_records()

    frame = pd.DataFrame(rows, columns=COLUMNS)
    duplicated = frame["path"].duplicated(keep="last")
    if duplicated.any():
        LOGGER.warning(
            "Duplicate records in %s for %s; keeping the last entry",
            path,
            sorted(frame.loc[duplicated, "path"].unique()),
        )
        frame = frame[~duplicated]
    return frame.reset_index(drop=True)


def parse_candidates(text: str) -> list[str]:
    """Split whitespace-separated candidate paths, keeping first occurrences in order."""

    return list(dict.fromkeys(text.split()))


def write_change_file(records: pd.DataFrame, dest: Path, *, sort_records: bool = True) -> Path:
    """Atomically rewrite `dest` with `records`."""

    missing = [col for col in COLUMNS if col not in records.columns]
    if missing:
        raise ChangeFileError(f"Missing required columns: {missing}")

    frame = records[COLUMNS]
    if sort_records:
        frame = frame.sort_values("path", kind="stable")

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = dest.with_suffix(dest.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            for fingerprint, target in frame.itertuples(index=False, name=None):
                handle.write(f"{fingerprint} {target}\n")
        tmp_path.replace(dest)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return dest


def _validate_fingerprint(value: str, *, source: str) -> None:
    if len(value) > FINGERPRINT_LENGTH or not _FINGERPRINT_RE.fullmatch(value):
        raise ChangeFileError(f"{source}: invalid fingerprint {value!r}.")


__all__ = [
    "COLUMNS",
    "ChangeFileError",
    "empty_records",
    "parse_candidates",
    "read_change_file",
    "write_change_file",
]
