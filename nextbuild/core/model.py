from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from ..utils.subproc import RunResult


SUCCESS = "success"
WARNING = "warning"
SKIPPED = "skipped"
ERROR = "error"

STATUSES = (SUCCESS, WARNING, SKIPPED, ERROR)

# What an interactive "no" to a follow-up means.
DECLINE_KEEP = "keep"
DECLINE_SKIP = "skip"


@dataclass(frozen=True)
class StepDefinition:
    id: str
    title: str
    description: str
    confirm: str
    default_enabled: bool
    default_output_visible: bool


@dataclass
class StepState:
    id: str
    enabled: bool
    output_visible: bool


@dataclass(frozen=True)
class StepOutcome:
    step_id: str
    title: str
    status: str  # success|warning|skipped|error
    log_file: Path | None = None
    message: str = ""


@dataclass(frozen=True)
class RunConfiguration:
    target_dir: Path
    log_dir: Path
    ci_mode: bool = False
    force_mode: bool = False

    @property
    def interactive(self) -> bool:
        return not (self.ci_mode or self.force_mode)


@dataclass(frozen=True)
class CommandSpec:
    """One external command (or internal check) of a step.

    `argv` items may contain `{target}`; with `expand_globs` items holding
    `*` are expanded relative to the target directory.
    """

    label: str
    argv: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    decisive: bool = True
    expand_globs: bool = False
    requires_tool: str | None = None
    internal: Callable[[Path], RunResult] | None = None


@dataclass
class StepExecution:
    results: dict[str, RunResult] = field(default_factory=dict)
    missing_tools: set[str] = field(default_factory=set)
    failed: bool = False
    force_warning: bool = False

    def output(self) -> str:
        return "".join(r.output for r in self.results.values())


@dataclass(frozen=True)
class FollowUp:
    """Optional extra commands offered after a step's main sequence.

    With `when=None` the follow-up is a recovery: it triggers on a decisive
    failure and, if it succeeds, clears the failure. Otherwise `when` is
    evaluated against a successful execution.
    """

    prompt: str
    commands: tuple[CommandSpec, ...] = ()
    when: Callable[[StepExecution], bool] | None = None
    ci_accepts: bool = True
    force_accepts: bool = True
    on_decline: str = DECLINE_KEEP
    warn_on_success: bool = False

    @property
    def is_recovery(self) -> bool:
        return self.when is None


@dataclass(frozen=True)
class StepRecipe:
    commands: tuple[CommandSpec, ...]
    follow_ups: tuple[FollowUp, ...] = ()
    requires_tool: str | None = None
    requires_file: str | None = None
    # Replaces `commands` (and drops follow-ups) in force mode.
    force_commands: tuple[CommandSpec, ...] | None = None
    force_note: str = ""
