from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Mapping, Sequence, TextIO


logger = logging.getLogger(__name__)

# Conventional shell status for "command not found".
NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class RunResult:
    command_str: str
    output: str
    exit_code: int
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def command_str(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(p) for p in args)


def run(
    args: Sequence[str],
    *,
    cwd: str,
    env_overrides: Mapping[str, str] | None = None,
    sink: TextIO | None = None,
    echo: bool = False,
) -> RunResult:
    """Run *args* to completion, merging stderr into stdout.

    Each output line is appended to *sink* as it arrives and, when *echo* is
    set, written to the terminal too. A command that cannot be started is
    reported as exit code 127 instead of raising.
    """

    cmd = command_str(args)
    env = {**os.environ, **(env_overrides or {})}
    start = time.monotonic()
    logger.debug("Running %s (cwd=%s)", cmd, cwd)

    try:
        proc = subprocess.Popen(
            list(args),
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        text = f"{args[0] if args else '?'}: {exc}\n"
        _emit(text, sink=sink, echo=echo)
        duration = time.monotonic() - start
        logger.debug("Could not start %s: %s", cmd, exc)
        return RunResult(command_str=cmd, output=text, exit_code=NOT_FOUND_EXIT_CODE, duration_s=duration)

    chunks: list[str] = []
    with proc:
        for line in proc.stdout:
            chunks.append(line)
            _emit(line, sink=sink, echo=echo)
        exit_code = proc.wait()

    duration = time.monotonic() - start
    logger.debug("%s exited with %d after %.1fs", cmd, exit_code, duration)
    return RunResult(command_str=cmd, output="".join(chunks), exit_code=exit_code, duration_s=duration)


def _emit(text: str, *, sink: TextIO | None, echo: bool) -> None:
    if sink is not None:
        sink.write(text)
    if echo:
        sys.stdout.write(text)
        sys.stdout.flush()
