#!/usr/bin/env python3
"""Unit tests for the command-line entry point (core/cli.py).

Tests argument handling, project checks and exit codes for each mode.
"""

from __future__ import annotations

import json

import pytest

import nextbuild.core.cli as cli
from nextbuild.core.model import ERROR
from nextbuild.steps.step_defs import list_steps
from nextbuild.utils.subproc import RunResult


def _all_disabled(project) -> None:
    steps = {s.id: {"enabled": False} for s in list_steps()}
    (project / "nextbuild.json").write_text(json.dumps({"steps": steps}), encoding="utf-8")


def _answers(monkeypatch, *values: str) -> list[str]:
    asked: list[str] = []
    feed = iter(values)

    def _input(prompt: str = "") -> str:
        asked.append(prompt)
        return next(feed)

    monkeypatch.setattr("builtins.input", _input)
    return asked


def _no_prompts(monkeypatch) -> None:
    monkeypatch.setattr("builtins.input", lambda *_a: pytest.fail("must not prompt"))


class _NoRunner:
    def __init__(self, *_a, **_k):
        raise AssertionError("runner must not be created")


class TestArguments:
    """Test argparse-level behavior."""

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--help"])
        assert excinfo.value.code == 0
        assert "--ci" in capsys.readouterr().out

    def test_multiple_paths_are_rejected(self, tmp_path):
        """More than one positional path is a usage error."""
        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(tmp_path), str(tmp_path)])
        assert excinfo.value.code != 0

    def test_missing_path_argument_fails(self, capsys):
        assert cli.main([]) == 1
        assert "No project path specified" in capsys.readouterr().err

    def test_list_steps(self, capsys):
        """--steps lists the registry and exits 0."""
        assert cli.main(["--steps"]) == 0
        out = capsys.readouterr().out
        assert "ssr_check" in out
        assert "docker_prep" in out


class TestProjectChecks:
    """Test path validation and Next.js detection before any step runs."""

    def test_nonexistent_target_fails_before_any_step(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(cli, "StepRunner", _NoRunner)

        assert cli.main(["--force", str(tmp_path / "nope")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_ci_mode_rejects_non_next_project(self, tmp_path, monkeypatch):
        _no_prompts(monkeypatch)
        monkeypatch.setattr(cli, "StepRunner", _NoRunner)
        assert cli.main(["--ci", str(tmp_path)]) == 1

    def test_force_mode_rejects_non_next_project(self, tmp_path, monkeypatch):
        """--force does not bypass the project check; no step runs."""
        _no_prompts(monkeypatch)
        monkeypatch.setattr(cli, "StepRunner", _NoRunner)
        assert cli.main(["--force", str(tmp_path)]) == 1

    def test_declining_non_next_project_exits_nonzero(self, tmp_path, monkeypatch):
        asked = _answers(monkeypatch, "n")
        assert cli.main([str(tmp_path)]) == 1
        assert asked == ["Continue anyway? (y/n): "]


class TestRuns:
    """Test complete runs in each mode."""

    def test_interactive_menu_exit_returns_zero(self, next_project, monkeypatch):
        _answers(monkeypatch, "0")
        assert cli.main([str(next_project)]) == 0

    def test_force_with_all_steps_disabled_prompts_only_for_statistics(self, next_project, monkeypatch):
        """--force skips the menu and confirmations; only the statistics loop asks."""
        _all_disabled(next_project)
        asked = _answers(monkeypatch, "2")

        assert cli.main(["--force", str(next_project)]) == 0

        assert asked == ["Select option: "]

    def test_force_run_summary_counts_all_skipped(self, next_project, monkeypatch):
        _all_disabled(next_project)
        _answers(monkeypatch, "2")
        captured = {}

        real_build_summary = cli.build_summary

        def _capture(steps, tracker):
            captured["counts"] = tracker.summary_counts()
            return real_build_summary(steps, tracker)

        monkeypatch.setattr(cli, "build_summary", _capture)

        assert cli.main(["--force", str(next_project)]) == 0
        assert captured["counts"]["skipped"] == len(list_steps())

    def test_ci_mode_fatal_error_exits_nonzero(self, next_project, monkeypatch):
        """A failing step in CI aborts with exit 1 and no prompts."""
        (next_project / "nextbuild.json").write_text(
            json.dumps({"steps": {s.id: {"enabled": s.id == "lint_checks"} for s in list_steps()}}),
            encoding="utf-8",
        )

        calls: list[list[str]] = []

        def _executor(argv, **_kw):
            calls.append(list(argv))
            return RunResult(" ".join(argv), "lint failed\n", 1)

        real_init = cli.StepRunner.__init__

        def _init(self, config, store, tracker, **kw):
            kw["executor"] = _executor
            real_init(self, config, store, tracker, **kw)

        monkeypatch.setattr(cli.StepRunner, "__init__", _init)
        _no_prompts(monkeypatch)

        assert cli.main(["--ci", str(next_project)]) == 1
        assert calls == [["npm", "run", "lint"]]

    def test_ci_run_writes_summary_and_exits_zero(self, next_project, monkeypatch, tmp_path):
        _all_disabled(next_project)
        log_dir = tmp_path / "ci-logs"
        monkeypatch.setenv("NEXTBUILD_LOG_DIR", str(log_dir))

        assert cli.main(["--ci", str(next_project)]) == 0

        data = json.loads((log_dir / "build-summary.json").read_text(encoding="utf-8"))
        assert data["counts"]["skipped"] == len(list_steps())
        assert data["counts"][ERROR] == 0
