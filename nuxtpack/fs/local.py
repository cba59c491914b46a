"""Turn a source tree on disk into the builder's input file set."""

from __future__ import annotations

from pathlib import Path

from ..models import FileSet
from .glob import glob

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".nuxt",
    ".nuxtpack",
}


def files_from_directory(path: Path | str) -> FileSet:
    """Return the user files of a project directory, skipping VCS and build output."""
    root = Path(path).expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Project path not found: {path}")
    if not root.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {path}")

    return glob("**", root, skip_dirs=_EXCLUDED_DIRS)


__all__ = ["files_from_directory"]
