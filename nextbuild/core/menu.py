from __future__ import annotations

from typing import Callable, Sequence

from . import prompts
from .model import StepDefinition, StepState
from .state import StepStateStore


GLYPH_DISABLED = "□"
GLYPH_HIDDEN = "■"
GLYPH_SHOWN = "●"

LEGEND = f"Legend: {GLYPH_DISABLED}=Disabled {GLYPH_HIDDEN}=Enabled(hidden) {GLYPH_SHOWN}=Enabled(shown)"

# handle() results
CONTINUE = "continue"
START = "start"
EXIT = "exit"
INVALID = "invalid"

_BULK_ACTIONS: dict[str, tuple[bool, bool]] = {
    "d": (False, False),
    "e": (True, False),
    "o": (True, True),
}


def glyph(state: StepState) -> str:
    if not state.enabled:
        return GLYPH_DISABLED
    if not state.output_visible:
        return GLYPH_HIDDEN
    return GLYPH_SHOWN


class StepMenu:
    """Interactive step selection.

    Loops until the user starts the build or exits; invalid input never
    changes any step state.
    """

    def __init__(
        self,
        steps: Sequence[StepDefinition],
        store: StepStateStore,
        *,
        ask: Callable[[str], str | None] = prompts.ask,
        out: Callable[[str], None] = print,
    ) -> None:
        self._steps = list(steps)
        self._store = store
        self._ask = ask
        self._out = out

    def render(self) -> str:
        num_width = len(str(len(self._steps)))
        name_width = max((len(s.title) for s in self._steps), default=0)

        lines = ["=== Build Step Configuration ===", "", LEGEND, "Press step number repeatedly to cycle through states", ""]
        for i, s in enumerate(self._steps, start=1):
            state = self._store.get(s.id)
            lines.append(f"{glyph(state)} {i:>{num_width}}. {s.title:<{name_width}} ({s.description})")
        lines.append("")
        lines.append(self.actions_line())
        return "\n".join(lines)

    def actions_line(self) -> str:
        return (
            f"Select (1-{len(self._steps)}) | D)isable All | E)nable All (Silent) | "
            "O)utput Enabled for All | S)tart Build | 0) Exit"
        )

    def handle(self, raw: str) -> str:
        choice = raw.strip().lower()

        if choice in ("0", "q"):
            return EXIT
        if choice == "s":
            return START
        if choice in _BULK_ACTIONS:
            enabled, visible = _BULK_ACTIONS[choice]
            self._store.set_all(enabled, visible)
            return CONTINUE
        if choice.isdecimal():
            index = int(choice)
            if 1 <= index <= len(self._steps):
                self._store.toggle(self._steps[index - 1].id)
                return CONTINUE
        return INVALID

    def choose(self) -> bool:
        """Run the menu loop. True to start the build, False to exit."""

        self._out(self.render())
        while True:
            raw = self._ask("❯ ")
            if raw is None:
                return False

            result = self.handle(raw)
            if result == START:
                return True
            if result == EXIT:
                return False
            if result == INVALID:
                self._out("Invalid input!")
                self._out(self.actions_line())
                continue

            self._out(self.render())
