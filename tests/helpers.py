from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

import pandas as pd

from touchdeps.fingerprint import fingerprint_bytes
from touchdeps.parse.changes import COLUMNS, empty_records

OLD_MTIME = 1_000_000


def seed_tree(root: Path, files: dict[str, bytes]) -> dict[str, Path]:
    """Write `files` under `root` with an old, fixed modification time."""

    paths: dict[str, Path] = {}
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        os.utime(path, (OLD_MTIME, OLD_MTIME))
        paths[name] = path
    return paths


def write_records(dest: Path, records: dict[Path, bytes]) -> Path:
    """Write a change file recording the fingerprint of the given contents."""

    lines = [f"{fingerprint_bytes(content)} {path}" for path, content in records.items()]
    dest.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return dest


def stdin_for(paths: list[Path]) -> str:
    return "\n".join(str(path) for path in paths) + "\n"


def records_from_pairs(pairs: Iterable[tuple[str, str]]) -> pd.DataFrame:
    """Build a ``[fingerprint, path]`` record frame."""

    rows = list(pairs)
    if not rows:
        return empty_records()
    return pd.DataFrame(rows, columns=COLUMNS)
