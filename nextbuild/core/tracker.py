from __future__ import annotations

from pathlib import Path

from .model import ERROR, SKIPPED, STATUSES, SUCCESS, WARNING, StepOutcome


class OutcomeTracker:
    """Step titles grouped by outcome, in the order the steps finished."""

    def __init__(self) -> None:
        self.succeeded: list[str] = []
        self.warned: list[str] = []
        self.skipped: list[str] = []
        self.errored: list[str] = []
        self._outcomes: list[StepOutcome] = []

    def _bucket(self, status: str) -> list[str]:
        return {
            SUCCESS: self.succeeded,
            WARNING: self.warned,
            SKIPPED: self.skipped,
            ERROR: self.errored,
        }[status]

    def record(
        self,
        status: str,
        title: str,
        *,
        step_id: str | None = None,
        log_file: Path | None = None,
        message: str = "",
    ) -> StepOutcome:
        if status not in STATUSES:
            raise ValueError(f"Unknown outcome status: {status!r}")
        if self.status_of(title) is not None:
            raise ValueError(f"Outcome already recorded for {title!r}")

        outcome = StepOutcome(
            step_id=step_id or title,
            title=title,
            status=status,
            log_file=log_file,
            message=message,
        )
        self._bucket(status).append(title)
        self._outcomes.append(outcome)
        return outcome

    @property
    def outcomes(self) -> tuple[StepOutcome, ...]:
        return tuple(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def status_of(self, title: str) -> str | None:
        for o in self._outcomes:
            if o.title == title:
                return o.status
        return None

    def outcome_for(self, step_id: str) -> StepOutcome | None:
        for o in self._outcomes:
            if o.step_id == step_id:
                return o
        return None

    def summary_counts(self) -> dict[str, int]:
        return {
            SUCCESS: len(self.succeeded),
            WARNING: len(self.warned),
            SKIPPED: len(self.skipped),
            ERROR: len(self.errored),
        }
