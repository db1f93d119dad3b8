from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Sequence

from . import prompts
from .model import ERROR, SKIPPED, SUCCESS, WARNING, StepDefinition, StepOutcome
from .tracker import OutcomeTracker


STATUS_LABELS = {
    SUCCESS: "success",
    WARNING: "warning",
    SKIPPED: "skipped",
    ERROR: "failed",
}

NO_LOGS_MESSAGE = "No logs available for this step"


@dataclass(frozen=True)
class StepSummary:
    id: str
    title: str
    status: str


@dataclass(frozen=True)
class BuildSummary:
    passed: bool
    health_score: int  # 0-100
    counts: dict[str, int]
    total_steps: int
    steps: list[StepSummary]


def recorded_outcomes(steps: Sequence[StepDefinition], tracker: OutcomeTracker) -> list[StepOutcome]:
    """Recorded outcomes in registry order; steps with no outcome are left out."""

    out: list[StepOutcome] = []
    for s in steps:
        o = tracker.outcome_for(s.id)
        if o is not None:
            out.append(o)
    return out


def health_score(counts: dict[str, int]) -> int:
    considered = counts[SUCCESS] + counts[WARNING] + counts[ERROR]
    if not considered:
        return 100
    return int(round(100 * (counts[SUCCESS] + counts[WARNING]) / considered))


def build_summary(steps: Sequence[StepDefinition], tracker: OutcomeTracker) -> BuildSummary:
    counts = tracker.summary_counts()
    return BuildSummary(
        passed=counts[ERROR] == 0,
        health_score=health_score(counts),
        counts=counts,
        total_steps=len(steps),
        steps=[StepSummary(id=o.step_id, title=o.title, status=o.status) for o in recorded_outcomes(steps, tracker)],
    )


def render_summary(steps: Sequence[StepDefinition], tracker: OutcomeTracker) -> str:
    width = max((len(s.title) for s in steps), default=0) + 2
    counts = tracker.summary_counts()

    lines = ["=== Build Statistics ===", f"{'Step':<{width}} Status", f"{'-' * 21:<{width}} {'-' * 21}"]
    for o in recorded_outcomes(steps, tracker):
        lines.append(f"{o.title:<{width}} {STATUS_LABELS[o.status]}")

    lines.append("")
    lines.append("Summary:")
    lines.append(f"  Successful: {counts[SUCCESS]}")
    lines.append(f"  Warnings:   {counts[WARNING]}")
    lines.append(f"  Skipped:    {counts[SKIPPED]}")
    lines.append(f"  Errors:     {counts[ERROR]}")
    lines.append(f"  Total:      {len(steps)} steps")
    return "\n".join(lines)


def write_summary(log_dir: Path, summary: BuildSummary) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    json_path = log_dir / "build-summary.json"
    md_path = log_dir / "build-summary.md"

    json_path.write_text(json.dumps(asdict(summary), indent=2) + "\n", encoding="utf-8")

    lines: list[str] = []
    lines.append("# Build summary")
    lines.append("")
    lines.append(f"- Passed: {'yes' if summary.passed else 'no'}")
    lines.append(f"- Health: {summary.health_score}/100")
    for status in (SUCCESS, WARNING, SKIPPED, ERROR):
        lines.append(f"- {STATUS_LABELS[status].capitalize()}: {summary.counts[status]}")
    lines.append("")
    lines.append("| # | Step | Status |")
    lines.append("|---:|---|---|")

    for i, s in enumerate(summary.steps, start=1):
        lines.append(f"| {i} | {s.title} | {STATUS_LABELS[s.status]} |")

    md_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


class LogViewer:
    """Lookup from a recorded step's index to its captured log text."""

    def __init__(
        self,
        steps: Sequence[StepDefinition],
        tracker: OutcomeTracker,
        *,
        ask: Callable[[str], str | None] = prompts.ask,
        out: Callable[[str], None] = print,
    ) -> None:
        self._entries = recorded_outcomes(steps, tracker)
        self._ask = ask
        self._out = out

    @property
    def entries(self) -> list[StepOutcome]:
        return list(self._entries)

    def read_log(self, index: int) -> str | None:
        """Log text for the 1-based *index*, or None when there is none."""

        if not 1 <= index <= len(self._entries):
            raise IndexError(index)
        log_file = self._entries[index - 1].log_file
        if log_file is None or not log_file.is_file():
            return None
        return log_file.read_text(encoding="utf-8", errors="replace")

    def render(self) -> str:
        width = max((len(o.title) for o in self._entries), default=0)
        lines = ["=== Execution Logs Viewer ===", "Select a step to view its execution logs:", ""]
        for i, o in enumerate(self._entries, start=1):
            lines.append(f"{i:2d}. {o.title:<{width}}  {STATUS_LABELS[o.status]}")
        lines.append("")
        lines.append(f"{len(self._entries) + 1}) Back to Statistics")
        lines.append("0) Exit")
        return "\n".join(lines)

    def run(self) -> bool:
        """Browse logs. True to go back (also on EOF), False when the user chose to exit."""

        back = len(self._entries) + 1
        while True:
            self._out(self.render())
            raw = self._ask("Select step to view logs: ")
            if raw is None:
                return True

            choice = raw.strip()
            if not choice.isdecimal():
                self._out("Invalid selection!")
                continue

            index = int(choice)
            if index == 0:
                return False
            if index == back:
                return True
            if index > back:
                self._out("Invalid selection!")
                continue

            text = self.read_log(index)
            if text is None:
                self._out(NO_LOGS_MESSAGE)
                continue

            title = self._entries[index - 1].title
            self._out(f"=== Logs for: {title} ===")
            self._out(text.rstrip("\n"))
            self._out("=== End of Log ===")
            self._ask("Press Enter to continue...")


def show_statistics(
    steps: Sequence[StepDefinition],
    tracker: OutcomeTracker,
    *,
    ask: Callable[[str], str | None] = prompts.ask,
    out: Callable[[str], None] = print,
) -> bool:
    """Post-run statistics loop. True to finish normally, False to exit."""

    while True:
        out(render_summary(steps, tracker))
        out("")
        out("Options:")
        out("1. View step detailed logs")
        out("2. Finish")
        out("0. Exit")

        raw = ask("Select option: ")
        if raw is None:
            return True

        choice = raw.strip()
        if choice == "1":
            if not LogViewer(steps, tracker, ask=ask, out=out).run():
                return False
        elif choice == "2":
            return True
        elif choice == "0":
            return False
        else:
            out("Invalid option!")
