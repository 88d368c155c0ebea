"""Pydantic models describing touchdeps configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FingerprintConfig(BaseModel):
    """How file contents are turned into fingerprints."""

    model_config = ConfigDict(extra="allow")

    algorithm: Literal["sha1"] = "sha1"
    encoding: Literal["base64"] = "base64"
    chunk_size: int = Field(default=65536, ge=1)


class ChangeFileConfig(BaseModel):
    """Layout of the ``<fingerprint> <path>`` record file."""

    model_config = ConfigDict(extra="allow")

    comment_prefix: str = "#"
    sort_records: bool = True

    @field_validator("comment_prefix")
    @classmethod
    def _non_blank_prefix(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("comment_prefix must not be blank.")
        return value


class RuntimeConfig(BaseModel):
    """Execution-time switches."""

    model_config = ConfigDict(extra="allow")

    dry_run: bool = False
    treat_new_as_changed: bool = True
    log_path: Optional[Path] = None
    report_dir: Optional[Path] = None


class TouchdepsConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    fingerprint: FingerprintConfig = Field(default_factory=FingerprintConfig)
    change_file: ChangeFileConfig = Field(default_factory=ChangeFileConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


__all__ = [
    "ChangeFileConfig",
    "FingerprintConfig",
    "RuntimeConfig",
    "TouchdepsConfig",
]
