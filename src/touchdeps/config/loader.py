"""Config loading entry points for touchdeps."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import TouchdepsConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "touchdeps.default.yaml"

CONFIG_ENV = "TOUCHDEPS_CONFIG"
ENV_OVERRIDES: Mapping[str, str] = {
    "TOUCHDEPS_DRY_RUN": "runtime.dry_run",
    "TOUCHDEPS_CHUNK_SIZE": "fingerprint.chunk_size",
}


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> TouchdepsConfig:
    """Load the configuration, layering file, environment and explicit overrides.

    Precedence, lowest first: packaged defaults, `path` (or ``$TOUCHDEPS_CONFIG``),
    ``TOUCHDEPS_*`` environment variables, `overrides`. Override keys may use
    dotted notation such as ``runtime.dry_run``.
    """

    merged = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    config_path = path
    if config_path is None and os.getenv(CONFIG_ENV):
        config_path = Path(os.environ[CONFIG_ENV])
    if config_path is not None:
        merged = _deep_merge(merged, _expect_mapping(_read_structured_file(config_path), config_path))

    env_values = {
        dotted: value for name, dotted in ENV_OVERRIDES.items() if (value := os.getenv(name))
    }
    if env_values:
        merged = _deep_merge(merged, _expand_override_keys(env_values))

    if overrides:
        merged = _deep_merge(merged, _expand_override_keys(overrides))

    try:
        return TouchdepsConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def dump_example_config(dest: Path) -> None:
    """Write the packaged default configuration to ``dest``."""

    if dest.suffix.lower() == ".toml":
        raise ConfigError("TOML export is not supported yet; use a YAML destination.")

    dest.parent.mkdir(parents=True, exist_ok=True)
    defaults = _read_structured_file(DEFAULT_CONFIG_PATH)
    if dest.suffix.lower() == ".json":
        dest.write_text(json.dumps(defaults, indent=2), encoding="utf-8")
        return
    dest.write_text(yaml.safe_dump(defaults, sort_keys=False), encoding="utf-8")


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix == ".json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result = dict(base)
    for key, value in extra.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


def _expand_override_keys(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``{"a.b": 1}`` into ``{"a": {"b": 1}}`` and merge the results."""

    result: dict[str, Any] = {}
    for key, value in overrides.items():
        nested: Any = value
        for segment in reversed(str(key).split(".")):
            nested = {segment: nested}
        result = _deep_merge(result, nested)
    return result


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "dump_example_config",
    "load_config",
]
