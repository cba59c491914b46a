"""Tests for the package manager runner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nuxtpack.npm.runner import CommandResult, NpmRunner, SubprocessFailure, npm_auth


class RecordingRunner:
    def __init__(self, returncode: int = 0, output: str = "") -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.returncode = returncode
        self.output = output

    def __call__(self, args, *, cwd):  # type: ignore[no-untyped-def]
        self.calls.append((list(args), Path(cwd)))
        return CommandResult(args=list(args), returncode=self.returncode, output=self.output)


def _write_package_json(path: Path, scripts: dict[str, str]) -> None:
    (path / "package.json").write_text(json.dumps({"scripts": scripts}), encoding="utf-8")


def test_install_passes_flags(tmp_path: Path) -> None:
    runner = RecordingRunner()

    NpmRunner(runner).install(tmp_path, ["--prefer-offline", "--production"])

    assert runner.calls == [(["npm", "install", "--prefer-offline", "--production"], tmp_path)]


def test_install_with_yarn(tmp_path: Path) -> None:
    runner = RecordingRunner()

    NpmRunner(runner, package_manager="yarn").install(tmp_path, ["--prefer-offline"])

    assert runner.calls[0][0] == ["yarn", "install", "--prefer-offline"]


def test_run_script_runs_declared_script(tmp_path: Path) -> None:
    _write_package_json(tmp_path, {"now-build": "nuxt build"})
    runner = RecordingRunner()

    assert NpmRunner(runner).run_script(tmp_path, "now-build") is True
    assert runner.calls == [(["npm", "run", "now-build"], tmp_path)]


def test_run_script_skips_undeclared_script(tmp_path: Path) -> None:
    _write_package_json(tmp_path, {"test": "jest"})
    runner = RecordingRunner()

    assert NpmRunner(runner).run_script(tmp_path, "now-build") is False
    assert runner.calls == []


def test_non_zero_exit_raises_subprocess_failure(tmp_path: Path) -> None:
    runner = RecordingRunner(returncode=2, output="ERR! missing dependency")

    with pytest.raises(SubprocessFailure) as excinfo:
        NpmRunner(runner).install(tmp_path)

    assert excinfo.value.returncode == 2
    assert excinfo.value.command == ["npm", "install"]
    assert "ERR! missing dependency" in str(excinfo.value)


def test_npm_auth_writes_and_removes_npmrc(tmp_path: Path) -> None:
    with npm_auth(tmp_path, "secret") as npmrc:
        assert npmrc is not None
        assert npmrc.read_text(encoding="utf-8") == "//registry.npmjs.org/:_authToken=secret"

    assert not (tmp_path / ".npmrc").exists()


def test_npm_auth_removes_npmrc_on_failure(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        with npm_auth(tmp_path, "secret"):
            raise RuntimeError("install failed")

    assert not (tmp_path / ".npmrc").exists()


def test_npm_auth_without_token_is_noop(tmp_path: Path) -> None:
    with npm_auth(tmp_path, None) as npmrc:
        assert npmrc is None
        assert not (tmp_path / ".npmrc").exists()
