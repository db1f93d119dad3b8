from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .. import __version__
from . import prompts
from .bootstrap import configure_logging
from .config import apply_step_overrides, load_build_config
from .errors import FatalStepError, PathValidationError
from .menu import GLYPH_DISABLED, StepMenu, glyph
from .model import ERROR, RunConfiguration
from .project import is_nextjs_app, validate_target
from .runner import StepRunner
from .state import StepStateStore
from .summary import build_summary, render_summary, show_statistics, write_summary
from .tracker import OutcomeTracker
from ..steps.step_defs import list_steps
from ..utils.paths import log_dir


logger = logging.getLogger(__name__)

NEXT_STEPS = (
    "Next Steps:",
    "1. Start application: npm start",
    "2. Monitor logs: tail -f logs/application.log",
    "3. Deployment checklist:",
    "   - Verify environment variables",
    "   - Check health endpoints",
    "   - Monitor resource usage",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextbuild",
        description="Next.js SSR build orchestrator.",
        epilog="Examples:\n  nextbuild ~/projects/my-app\n  nextbuild --ci /var/www/app",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", help="Path to the Next.js project directory")
    parser.add_argument("--ci", action="store_true", help="Run in CI/CD mode (non-interactive)")
    parser.add_argument("--force", action="store_true", help="Skip all confirmation prompts")
    parser.add_argument("--steps", action="store_true", help="List available build steps and exit")
    parser.add_argument("--config", help="Path to a JSON build config (default: <path>/nextbuild.json)")
    parser.add_argument("--version", action="version", version=f"nextbuild {__version__}")
    return parser


def _list_steps() -> None:
    store = StepStateStore(list_steps())
    print(f"Legend: {GLYPH_DISABLED}=Disabled ■=Enabled(hidden) ●=Enabled(shown)")
    for i, s in enumerate(list_steps(), start=1):
        print(f"  {glyph(store.get(s.id))} {i:>2}  {s.id:<15} {s.title:<26} - {s.description}")


def _confirm_project(target, *, ci: bool, force: bool) -> bool:
    if is_nextjs_app(target):
        return True

    print("✗ This doesn't appear to be a Next.js project.")
    # Only an interactive user may override the check.
    if ci or force:
        logger.debug("%s has no Next.js indicators; aborting", target)
        return False
    return prompts.confirm("Continue anyway?")


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging()

    if args.steps:
        _list_steps()
        return 0

    if not args.path:
        print("ERROR: No project path specified", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        return _run(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


def _run(args: argparse.Namespace) -> int:
    try:
        target = validate_target(args.path)
    except PathValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(f"✓ Working directory: {target}")

    if not _confirm_project(target, ci=args.ci, force=args.force):
        return 1

    build_config = load_build_config(target, args.config)
    config = RunConfiguration(
        target_dir=target,
        log_dir=log_dir(build_config.log_dir),
        ci_mode=args.ci,
        force_mode=args.force,
    )

    steps = list_steps()
    store = StepStateStore(steps)
    apply_step_overrides(store, build_config)

    if config.interactive and not StepMenu(steps, store).choose():
        return 0

    print("\n=== Starting Build Process ===")
    print(f"Running with {store.enabled_count()} of {len(steps)} steps (logs: {config.log_dir})")

    tracker = OutcomeTracker()
    runner = StepRunner(config, store, tracker)
    try:
        runner.run_all(steps)
    except FatalStepError as exc:
        print(f"✗ Aborting: {exc.title} failed in CI mode", file=sys.stderr)
        return 1

    write_summary(config.log_dir, build_summary(steps, tracker))

    errors = tracker.summary_counts()[ERROR]
    if errors == 0:
        print("\n✔ Build Completed Successfully!")
    else:
        print(f"\n⚠ Build Completed with {errors} errors")

    if config.ci_mode:
        print(render_summary(steps, tracker))
    elif not show_statistics(steps, tracker):
        return 0

    print()
    print("\n".join(NEXT_STEPS))
    return 0
