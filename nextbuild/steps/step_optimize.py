from __future__ import annotations

from pathlib import Path

from ..utils.subproc import RunResult


CONFIG_FILE = "next.config.js"
MARKER = "serverComponentsExternalPackages"
EXPORT_ANCHOR = "module.exports ="
INSERTED_LINE = '  experimental: { serverComponentsExternalPackages: ["@prisma/client", "lodash-es"] },'


def patch_next_config(text: str) -> str | None:
    """Return *text* with the SSR external-packages option added.

    Returns None when nothing needs to change (already configured, or no
    `module.exports =` line to anchor on).
    """

    if MARKER in text:
        return None

    lines = text.splitlines(keepends=True)
    out: list[str] = []
    patched = False
    for line in lines:
        out.append(line)
        if not patched and EXPORT_ANCHOR in line:
            if not line.endswith("\n"):
                out[-1] = line + "\n"
            out.append(INSERTED_LINE + "\n")
            patched = True

    return "".join(out) if patched else None


def next_config_runner(target: Path) -> RunResult:
    path = target / CONFIG_FILE
    if not path.is_file():
        return RunResult(
            command_str="(internal) patch next.config.js",
            output=f"{CONFIG_FILE} not found; leaving configuration untouched\n",
            exit_code=0,
        )

    try:
        patched = patch_next_config(path.read_text(encoding="utf-8"))
        if patched is None:
            message = f"{CONFIG_FILE}: no change needed\n"
        else:
            path.write_text(patched, encoding="utf-8")
            message = f"{CONFIG_FILE}: added experimental.{MARKER}\n"
    except OSError as exc:
        return RunResult(
            command_str="(internal) patch next.config.js",
            output=f"Error: could not update {CONFIG_FILE}: {exc}\n",
            exit_code=1,
        )

    return RunResult(command_str="(internal) patch next.config.js", output=message, exit_code=0)
