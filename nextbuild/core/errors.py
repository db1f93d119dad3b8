from __future__ import annotations


class NextBuildError(Exception):
    """Base class for orchestrator errors."""


class StepNotFoundError(NextBuildError, KeyError):
    def __init__(self, step_id: str) -> None:
        super().__init__(step_id)
        self.step_id = step_id

    def __str__(self) -> str:
        return f"Unknown step: {self.step_id!r}"


class PathValidationError(NextBuildError):
    """Target directory is missing, not a directory, or not accessible."""


class FatalStepError(NextBuildError):
    """A step failed in CI mode; the run must stop."""

    def __init__(self, step_id: str, title: str) -> None:
        super().__init__(f"{title} failed")
        self.step_id = step_id
        self.title = title
