from __future__ import annotations

import os
from pathlib import Path

from ..utils.subproc import RunResult, run


MIN_NODE_MAJOR = 16

# Variables the SSR runtime expects; values are not inspected.
SSR_ENV_VARS = ("NEXT_PUBLIC_SSR_MODE", "SESSION_SECRET")


def parse_node_major(version_text: str) -> int | None:
    """Parse the major version out of `node -v` output (e.g. "v18.17.1")."""

    text = version_text.strip().lstrip("v")
    head = text.split(".", 1)[0]
    try:
        return int(head)
    except ValueError:
        return None


def ssr_check_runner(target: Path) -> RunResult:
    lines: list[str] = ["SSR environment check", ""]
    exit_code = 0

    node = run(["node", "-v"], cwd=str(target))
    major = parse_node_major(node.output) if node.ok else None
    if major is None:
        lines.append("Error: could not determine Node.js version (is node installed?)")
        exit_code = 1
    elif major < MIN_NODE_MAJOR:
        lines.append(f"Warning: SSR requires Node.js v{MIN_NODE_MAJOR}+ (current: v{major})")
        exit_code = 1
    else:
        lines.append(f"Node.js v{major} OK")

    for var in SSR_ENV_VARS:
        if not os.environ.get(var):
            lines.append(f"Warning: Missing SSR variable: {var}")

    return RunResult(
        command_str="(internal) ssr environment check",
        output="\n".join(lines) + "\n",
        exit_code=exit_code,
        duration_s=node.duration_s,
    )
