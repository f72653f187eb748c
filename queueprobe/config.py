import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .models import HarnessConfig

# -----------------------------
# YAML loaders
# -----------------------------

def _read_yaml(path: str | os.PathLike) -> dict:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"YAML file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"YAML root must be a mapping/object: {p}")
    return data


# -----------------------------
# Config loaders
# -----------------------------

def load_harness_config(path: str | os.PathLike) -> HarnessConfig:
    """Load and validate a harness YAML file into a HarnessConfig."""
    raw = _read_yaml(path)
    try:
        return HarnessConfig.model_validate(raw)
    except ValidationError as ve:
        raise ConfigError(f"Invalid harness config {path}:\n{ve}") from ve


def apply_overrides(config: HarnessConfig, **overrides: Any) -> HarnessConfig:
    """
    Return a copy of `config` with every non-None override applied.

    `timeout` (seconds) is accepted as a shorthand that sets both connect
    and read timeouts.
    """
    updates = {k: v for k, v in overrides.items() if v is not None}
    timeout = updates.pop("timeout", None)
    if timeout is not None:
        updates["timeouts"] = {"connect": timeout, "read": timeout}

    merged = config.model_dump()
    merged.update(updates)
    try:
        return HarnessConfig.model_validate(merged)
    except ValidationError as ve:
        raise ConfigError(f"Invalid harness settings:\n{ve}") from ve


def default_config() -> HarnessConfig:
    return HarnessConfig()


__all__ = ["load_harness_config", "apply_overrides", "default_config"]
