"""Entrypoint validation for the builder."""

from __future__ import annotations

import posixpath

from .models import normalize_path

SUPPORTED_ENTRYPOINTS = ("package.json", "nuxt.config.js")


class InvalidEntrypoint(ValueError):
    """Raised when the requested entrypoint is not a supported manifest."""

    def __init__(self, entrypoint: str) -> None:
        self.entrypoint = entrypoint
        super().__init__(
            f'Specified "src" {entrypoint!r} has to be "package.json" or "nuxt.config.js"'
        )


def validate_entrypoint(entrypoint: str) -> None:
    """Raise :class:`InvalidEntrypoint` unless ``entrypoint`` names a supported manifest."""
    if not entrypoint.endswith(SUPPORTED_ENTRYPOINTS):
        raise InvalidEntrypoint(entrypoint)


def entry_directory(entrypoint: str) -> str:
    """Return the directory holding ``entrypoint``, ``"."`` for the project root."""
    directory = posixpath.dirname(entrypoint.replace("\\", "/"))
    if not directory or posixpath.normpath(directory) == ".":
        return "."
    try:
        return normalize_path(directory)
    except ValueError as exc:
        raise InvalidEntrypoint(entrypoint) from exc


__all__ = [
    "InvalidEntrypoint",
    "SUPPORTED_ENTRYPOINTS",
    "entry_directory",
    "validate_entrypoint",
]
