"""Package manager subprocess helpers."""

from __future__ import annotations

import json
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from ..logging import get_logger

NPMRC = ".npmrc"
REGISTRY_AUTH_LINE = "//registry.npmjs.org/:_authToken={token}"


class SubprocessFailure(RuntimeError):
    """Raised when an install or build command exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        message = f"Command {' '.join(self.command)!r} exited with {returncode}"
        if output.strip():
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a completed subprocess."""

    args: Sequence[str]
    returncode: int
    output: str


Runner = Callable[..., CommandResult]


class NpmRunner:
    """Runs installs and package.json scripts in a project directory."""

    def __init__(
        self,
        runner: Runner | None = None,
        *,
        package_manager: str = "npm",
    ) -> None:
        self._runner = runner or self._default_runner
        self.package_manager = package_manager
        self.logger = get_logger("npm")

    def install(self, work_path: Path | str, flags: Sequence[str] = ()) -> None:
        """Install dependencies declared in ``work_path``'s package.json."""
        if self.package_manager == "yarn":
            args = ["yarn", "install", *flags]
        else:
            args = ["npm", "install", *flags]
        self.logger.info("Running %s in %s", " ".join(args), work_path)
        self._run(args, cwd=Path(work_path))

    def run_script(self, work_path: Path | str, script_name: str) -> bool:
        """Run ``script_name`` when declared; return False when it is missing."""
        cwd = Path(work_path)
        if not self._has_script(cwd, script_name):
            self.logger.info("Script %s not declared in package.json; skipping", script_name)
            return False
        args = [self.package_manager, "run", script_name]
        self.logger.info("Running %s in %s", " ".join(args), cwd)
        self._run(args, cwd=cwd)
        return True

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _has_script(cwd: Path, script_name: str) -> bool:
        try:
            payload = json.loads((cwd / "package.json").read_text(encoding="utf-8-sig"))
        except FileNotFoundError:
            return False
        scripts = payload.get("scripts") if isinstance(payload, dict) else None
        return isinstance(scripts, dict) and script_name in scripts

    def _run(self, args: Sequence[str], *, cwd: Path) -> CommandResult:
        result = self._runner(args, cwd=cwd)
        if result.returncode != 0:
            raise SubprocessFailure(args, result.returncode, result.output)
        if result.output:
            self.logger.debug("%s output:\n%s", args[0], result.output.rstrip())
        return result

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path) -> CommandResult:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=False,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        return CommandResult(args=list(args), returncode=completed.returncode, output=completed.stdout or "")


@contextmanager
def npm_auth(work_path: Path | str, token: Optional[str]) -> Iterator[Optional[Path]]:
    """Write a registry ``.npmrc`` for the duration of the block when a token is set."""
    if not token:
        yield None
        return
    logger = get_logger("npm")
    npmrc = Path(work_path) / NPMRC
    logger.info("Registry token configured, creating %s", NPMRC)
    npmrc.write_text(REGISTRY_AUTH_LINE.format(token=token), encoding="utf-8")
    try:
        yield npmrc
    finally:
        npmrc.unlink(missing_ok=True)


__all__ = ["CommandResult", "NpmRunner", "SubprocessFailure", "npm_auth"]
