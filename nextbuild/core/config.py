"""Optional per-project build configuration.

A JSON file that overrides the registry defaults:

    {"log_dir": "/var/log/nextbuild",
     "steps": {"lint_checks": {"enabled": false},
               "build": {"enabled": true, "show_output": true}}}
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .state import StepStateStore


logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "nextbuild.json"


@dataclass(frozen=True)
class StepOverride:
    enabled: bool | None = None
    show_output: bool | None = None


@dataclass(frozen=True)
class BuildConfig:
    source: Path | None = None
    log_dir: str | None = None
    steps: dict[str, StepOverride] = field(default_factory=dict)


def config_file_path(target: Path, explicit: str | Path | None = None) -> Path:
    """Return the config file to read.

    Priority:
    - explicit path (--config)
    - NEXTBUILD_CONFIG_PATH
    - <target>/nextbuild.json
    """

    if explicit:
        return Path(explicit)

    p = os.environ.get("NEXTBUILD_CONFIG_PATH")
    if p:
        return Path(p)

    return target / CONFIG_FILE_NAME


def load_config_data(
    config_file: Path,
    *,
    retries: int = 3,
    retry_delay: float = 0.02,
) -> dict[str, Any] | None:
    """Load config JSON with retries for transient partial writes.

    Returns {} when the file does not exist and None when it cannot be read.
    """

    if not config_file.exists():
        return {}

    last_error: Exception | None = None
    for _ in range(max(1, retries)):
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                logger.warning("Ignoring %s: expected a JSON object", config_file)
                return {}
            return loaded
        except json.JSONDecodeError as e:
            last_error = e
            time.sleep(retry_delay)
        except OSError as e:
            last_error = e
            break

    logger.warning("Failed to load config %s: %s", config_file, last_error)
    return None


def _as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def parse_build_config(data: dict[str, Any], *, source: Path | None = None) -> BuildConfig:
    steps: dict[str, StepOverride] = {}
    raw_steps = data.get("steps") or {}
    if not isinstance(raw_steps, dict):
        logger.warning("Ignoring 'steps' in %s: expected an object", source)
        raw_steps = {}

    for step_id, raw in raw_steps.items():
        if not isinstance(raw, dict):
            logger.warning("Ignoring override for %s: expected an object", step_id)
            continue
        steps[str(step_id)] = StepOverride(
            enabled=_as_bool(raw.get("enabled")),
            show_output=_as_bool(raw.get("show_output")),
        )

    log_dir = data.get("log_dir")
    return BuildConfig(
        source=source,
        log_dir=str(log_dir) if isinstance(log_dir, str) and log_dir else None,
        steps=steps,
    )


def load_build_config(target: Path, explicit: str | Path | None = None) -> BuildConfig:
    path = config_file_path(target, explicit)
    data = load_config_data(path)
    if not data:
        return BuildConfig()
    logger.debug("Loaded build config from %s", path)
    return parse_build_config(data, source=path)


def apply_step_overrides(store: StepStateStore, config: BuildConfig) -> None:
    for step_id, override in config.steps.items():
        if step_id not in store:
            logger.warning("Ignoring override for unknown step %r", step_id)
            continue
        state = store.get(step_id)
        enabled = state.enabled if override.enabled is None else override.enabled
        visible = state.output_visible if override.show_output is None else override.show_output
        store.set(step_id, enabled=enabled, output_visible=visible)
