from __future__ import annotations

import os
from pathlib import Path

from .errors import PathValidationError


NEXTJS_INDICATORS = (
    "next.config.js",
    "next.config.ts",
    "next.config.mjs",
    "pages",
    "app",
    "middleware.js",
    "middleware.ts",
    "next-env.d.ts",
)

MIN_INDICATORS = 2


def validate_target(raw: str | Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_dir():
        raise PathValidationError(f"Directory '{raw}' not found")
    if not (os.access(path, os.R_OK) and os.access(path, os.W_OK)):
        raise PathValidationError(f"Can't access '{raw}' (check permissions)")
    return path.resolve()


def nextjs_indicators(target: Path) -> list[str]:
    return [name for name in NEXTJS_INDICATORS if (target / name).exists()]


def is_nextjs_app(target: Path) -> bool:
    return len(nextjs_indicators(target)) >= MIN_INDICATORS
