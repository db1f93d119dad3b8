from __future__ import annotations

import os
import tempfile
from pathlib import Path


def default_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "nextjs_build_logs"


def log_dir(override: str | Path | None = None) -> Path:
    """Return the directory holding per-step log files.

    Priority:
    - explicit override (config file `log_dir`)
    - NEXTBUILD_LOG_DIR
    - <tmp>/nextjs_build_logs
    """

    if override:
        return Path(override)

    p = os.environ.get("NEXTBUILD_LOG_DIR")
    if p:
        return Path(p)

    return default_log_dir()


def step_log_file(directory: Path, step_id: str) -> Path:
    return directory / f"{step_id}.log"
