from __future__ import annotations

from typing import Iterable

from .errors import StepNotFoundError
from .model import StepDefinition, StepState


class StepStateStore:
    """Mutable (enabled, output_visible) pair per step.

    A disabled step never has its output visible.
    """

    def __init__(self, steps: Iterable[StepDefinition]) -> None:
        self._states: dict[str, StepState] = {}
        for s in steps:
            self._states[s.id] = StepState(
                id=s.id,
                enabled=s.default_enabled,
                output_visible=s.default_enabled and s.default_output_visible,
            )

    def __iter__(self):
        return iter(self._states.values())

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._states

    def get(self, step_id: str) -> StepState:
        try:
            return self._states[step_id]
        except KeyError:
            raise StepNotFoundError(step_id) from None

    def set(self, step_id: str, *, enabled: bool, output_visible: bool) -> StepState:
        state = self.get(step_id)
        state.enabled = bool(enabled)
        state.output_visible = bool(enabled and output_visible)
        return state

    def toggle(self, step_id: str) -> StepState:
        """Cycle disabled -> enabled (hidden) -> enabled (shown) -> disabled."""

        state = self.get(step_id)
        if not state.enabled:
            state.enabled, state.output_visible = True, False
        elif not state.output_visible:
            state.output_visible = True
        else:
            state.enabled, state.output_visible = False, False
        return state

    def set_all(self, enabled: bool, output_visible: bool) -> None:
        for state in self._states.values():
            state.enabled = bool(enabled)
            state.output_visible = bool(enabled and output_visible)

    def enabled_count(self) -> int:
        return sum(1 for s in self._states.values() if s.enabled)
