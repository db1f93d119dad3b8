from __future__ import annotations

import glob
import logging
import re
import shutil
from pathlib import Path
from typing import Callable, Iterable, Mapping, TextIO

from . import prompts
from .errors import FatalStepError
from .model import (
    DECLINE_SKIP,
    ERROR,
    SKIPPED,
    SUCCESS,
    WARNING,
    CommandSpec,
    FollowUp,
    RunConfiguration,
    StepDefinition,
    StepExecution,
    StepOutcome,
    StepRecipe,
)
from .state import StepStateStore
from .tracker import OutcomeTracker
from ..steps.recipes import recipes as default_recipes
from ..utils import subproc
from ..utils.log_format import format_command_footer, format_command_header, format_note
from ..utils.paths import step_log_file


logger = logging.getLogger(__name__)

WARNING_PATTERN = re.compile(r"warning", re.IGNORECASE)

Executor = Callable[..., subproc.RunResult]


def classify(failed: bool, log_text: str, *, force_warning: bool = False) -> str:
    if failed:
        return ERROR
    if force_warning or WARNING_PATTERN.search(log_text):
        return WARNING
    return SUCCESS


def expand_argv(spec: CommandSpec, target: Path) -> list[str]:
    argv: list[str] = []
    for item in spec.argv:
        item = item.replace("{target}", str(target))
        if spec.expand_globs and "*" in item:
            matches = sorted(glob.glob(item, root_dir=str(target)))
            argv.extend(matches or [item])
        else:
            argv.append(item)
    return argv


class StepRunner:
    """Runs steps in order, one outcome per step.

    Step failures are recorded, never raised; in CI mode an error outcome
    raises FatalStepError after it has been recorded.
    """

    def __init__(
        self,
        config: RunConfiguration,
        store: StepStateStore,
        tracker: OutcomeTracker,
        *,
        recipes: Mapping[str, StepRecipe] | None = None,
        executor: Executor = subproc.run,
        confirm: Callable[[str], bool] = prompts.confirm,
        which: Callable[[str], str | None] = shutil.which,
        out: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.store = store
        self.tracker = tracker
        self._recipes = dict(recipes) if recipes is not None else default_recipes()
        self._executor = executor
        self._confirm = confirm
        self._which = which
        self._out = out

    def run_all(self, steps: Iterable[StepDefinition]) -> None:
        for step in steps:
            self.run_step(step)

    def run_step(self, step: StepDefinition) -> StepOutcome:
        state = self.store.get(step.id)
        log_file = step_log_file(self.config.log_dir, step.id)

        if not state.enabled:
            self._out(f"↪ Skipping: {step.title} (disabled)")
            return self._finish(step, SKIPPED, None, announce=False)

        self._out(f"\n=== Running: {step.title} ===")
        self._out(f"Purpose: {step.description}")

        if self.config.interactive and not self._confirm(step.confirm):
            return self._finish(step, SKIPPED, None)

        recipe = self._recipes[step.id]
        self.config.log_dir.mkdir(parents=True, exist_ok=True)

        unmet = self._unmet_precondition(recipe)
        if unmet:
            log_file.write_text(format_note(unmet), encoding="utf-8")
            self._out(unmet)
            return self._finish(step, WARNING, log_file, message=unmet)

        with log_file.open("w", encoding="utf-8") as sink:
            execution, declined = self._execute(step, recipe, state.output_visible, sink)

        if declined:
            return self._finish(step, SKIPPED, log_file)

        status = classify(execution.failed, execution.output(), force_warning=execution.force_warning)
        return self._finish(step, status, log_file)

    def _unmet_precondition(self, recipe: StepRecipe) -> str:
        if recipe.requires_tool and self._which(recipe.requires_tool) is None:
            return f"{recipe.requires_tool} not found; skipping"
        if recipe.requires_file and not (self.config.target_dir / recipe.requires_file).exists():
            return f"{recipe.requires_file} not found in {self.config.target_dir}; skipping"
        return ""

    def _execute(
        self,
        step: StepDefinition,
        recipe: StepRecipe,
        visible: bool,
        sink: TextIO,
    ) -> tuple[StepExecution, bool]:
        """Run the main sequence and any triggered follow-ups.

        Returns the execution record and whether a declined follow-up turned
        the step into a skip.
        """

        execution = StepExecution()

        if self.config.force_mode and recipe.force_commands is not None:
            ok = self._run_commands(step, recipe.force_commands, visible, sink, execution)
            execution.failed = not ok
            if recipe.force_note:
                self._out(f"↪ {recipe.force_note}")
            return execution, False

        execution.failed = not self._run_commands(step, recipe.commands, visible, sink, execution)

        for follow_up in recipe.follow_ups:
            if follow_up.is_recovery:
                if not execution.failed:
                    continue
            elif execution.failed or not follow_up.when(execution):
                continue

            accepted = self._decide(follow_up)
            if accepted is None:
                continue
            if not accepted:
                if follow_up.on_decline == DECLINE_SKIP:
                    return execution, True
                continue

            ok = self._run_commands(step, follow_up.commands, visible, sink, execution)
            execution.failed = not ok
            if ok and follow_up.warn_on_success:
                execution.force_warning = True

        return execution, False

    def _decide(self, follow_up: FollowUp) -> bool | None:
        """True/False for an answer, None when not offered in automated modes."""

        if self.config.ci_mode:
            return True if follow_up.ci_accepts else None
        if self.config.force_mode:
            return True if follow_up.force_accepts else None
        return self._confirm(follow_up.prompt)

    def _run_commands(
        self,
        step: StepDefinition,
        commands: Iterable[CommandSpec],
        visible: bool,
        sink: TextIO,
        execution: StepExecution,
    ) -> bool:
        for spec in commands:
            if spec.requires_tool and self._which(spec.requires_tool) is None:
                execution.missing_tools.add(spec.requires_tool)
                sink.write(f"{spec.requires_tool} not found; skipping {spec.label}\n\n")
                continue

            result = self._run_one(step, spec, visible, sink)
            execution.results[spec.label] = result
            if not result.ok and spec.decisive:
                return False
        return True

    def _run_one(self, step: StepDefinition, spec: CommandSpec, visible: bool, sink: TextIO) -> subproc.RunResult:
        target = self.config.target_dir

        if spec.internal is not None:
            command = f"(internal) {spec.label}"
        else:
            argv = expand_argv(spec, target)
            command = subproc.command_str(argv)

        sink.write(format_command_header(step.title, command))
        sink.flush()
        if not visible:
            self._out("Running command (output hidden)...")

        if spec.internal is not None:
            result = spec.internal(target)
            sink.write(result.output)
            if visible:
                self._out(result.output.rstrip("\n"))
        else:
            result = self._executor(
                argv,
                cwd=str(target),
                env_overrides=dict(spec.env),
                sink=sink,
                echo=visible,
            )

        sink.write(format_command_footer(result.exit_code, result.duration_s))
        if not visible:
            self._out("Command completed")
        logger.debug("%s: %s -> %d", step.id, command, result.exit_code)
        return result

    def _finish(
        self,
        step: StepDefinition,
        status: str,
        log_file: Path | None,
        *,
        message: str = "",
        announce: bool = True,
    ) -> StepOutcome:
        if log_file is None:
            # Logs from a previous run must not be shown for this one.
            step_log_file(self.config.log_dir, step.id).unlink(missing_ok=True)

        outcome = self.tracker.record(status, step.title, step_id=step.id, log_file=log_file, message=message)
        if announce:
            self._out(announce_line(outcome))

        if status == ERROR and self.config.ci_mode:
            raise FatalStepError(step.id, step.title)
        return outcome


def announce_line(outcome: StepOutcome) -> str:
    if outcome.status == SKIPPED:
        return f"↪ Skipped: {outcome.title}"
    if outcome.status == WARNING:
        return f"⚠ {outcome.title} completed with warnings"
    if outcome.status == SUCCESS:
        return f"✓ {outcome.title} completed successfully"
    return f"✗ {outcome.title} encountered errors"
