from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..utils.subproc import RunResult


logger = logging.getLogger(__name__)

CLEAN_DIRS = ("node_modules", ".next", ".cache")


def cleanup_runner(target: Path) -> RunResult:
    lines: list[str] = []
    exit_code = 0

    for name in CLEAN_DIRS:
        path = target / name
        if not path.is_dir():
            continue
        lines.append(f"Cleaning {name}...")
        try:
            shutil.rmtree(path)
        except OSError as exc:
            logger.debug("Failed to remove %s: %s", path, exc)
            lines.append(f"Error: failed to remove {name}: {exc}")
            exit_code = 1
            break

    if not lines:
        lines.append("Nothing to clean.")

    return RunResult(
        command_str="(internal) remove build artifacts",
        output="\n".join(lines) + "\n",
        exit_code=exit_code,
    )
