from __future__ import annotations

from pathlib import Path

import pytest

from nextbuild.utils.subproc import RunResult


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path_factory, monkeypatch):
    # Never write to the real shared log directory or read a user config.
    monkeypatch.setenv("NEXTBUILD_LOG_DIR", str(tmp_path_factory.mktemp("logs")))
    monkeypatch.delenv("NEXTBUILD_CONFIG_PATH", raising=False)
    monkeypatch.delenv("NEXTBUILD_DEBUG", raising=False)


@pytest.fixture
def next_project(tmp_path: Path) -> Path:
    """A directory that looks like a Next.js app."""

    root = tmp_path / "app-under-test"
    root.mkdir()
    (root / "next.config.js").write_text("module.exports = {\n  reactStrictMode: true,\n}\n", encoding="utf-8")
    (root / "pages").mkdir()
    (root / "package.json").write_text("{}\n", encoding="utf-8")
    return root


class FakeExecutor:
    """Records argv per call and replays scripted results by argv[0:2]."""

    def __init__(self, results: dict[tuple[str, ...], tuple[int, str]] | None = None) -> None:
        self.results = results or {}
        self.calls: list[list[str]] = []
        self.echoed: list[bool] = []
        self.envs: list[dict] = []

    def _lookup(self, argv: list[str]) -> tuple[int, str]:
        for n in range(len(argv), 0, -1):
            key = tuple(argv[:n])
            if key in self.results:
                return self.results[key]
        return 0, "ok\n"

    def __call__(self, argv, *, cwd, env_overrides=None, sink=None, echo=False) -> RunResult:
        argv = list(argv)
        self.calls.append(argv)
        self.echoed.append(echo)
        self.envs.append(dict(env_overrides or {}))
        code, output = self._lookup(argv)
        if sink is not None:
            sink.write(output)
        return RunResult(command_str=" ".join(argv), output=output, exit_code=code)


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()
