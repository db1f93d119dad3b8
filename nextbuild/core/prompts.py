from __future__ import annotations

_YES = {"y", "yes"}


def ask(prompt: str) -> str | None:
    """Read one line from the user; None on end of input."""

    try:
        return input(prompt)
    except EOFError:
        return None


def confirm(question: str) -> bool:
    answer = ask(f"{question} (y/n): ")
    if answer is None:
        return False
    return answer.strip().lower() in _YES
