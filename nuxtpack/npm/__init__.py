"""Package manager adapters."""

from .runner import CommandResult, NpmRunner, SubprocessFailure, npm_auth

__all__ = ["CommandResult", "NpmRunner", "SubprocessFailure", "npm_auth"]
