from __future__ import annotations

from datetime import datetime, timezone


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_command_header(title: str, command: str) -> str:
    return f"=== {title} - {iso_now()} ===\nCommand: {command}\n\n"


def format_command_footer(exit_code: int, duration_s: float) -> str:
    return f"\nExit Code: {exit_code}\nDuration: ({duration_s:.1f}s)\n=== END ===\n\n"


def format_note(text: str) -> str:
    """Log entry for a step that ended before running any command."""

    return f"=== NOTE - {iso_now()} ===\n{text.rstrip()}\n=== END ===\n"
