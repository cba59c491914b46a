"""Collect files from disk into a :class:`~nuxtpack.models.FileSet`."""

from __future__ import annotations

import os
import stat
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Collection, Dict, Sequence

from ..models import FileFsRef, FileRef, FileSet


def _matches(parts: Sequence[str], pattern: Sequence[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        # ``**`` swallows zero or more whole segments.
        for index in range(len(parts) + 1):
            if _matches(parts[index:], pattern[1:]):
                return True
        return False
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _matches(parts[1:], pattern[1:])


def match_path(path: str, pattern: str) -> bool:
    """Return True when the ``/``-separated ``path`` matches the glob ``pattern``."""
    segments = [segment for segment in pattern.replace("\\", "/").split("/") if segment]
    return _matches(path.split("/"), segments)


def glob(pattern: str, base_dir: Path | str, *, skip_dirs: Collection[str] = ()) -> FileSet:
    """Return every regular file under ``base_dir`` matching ``pattern``.

    Keys are relative to ``base_dir``. Hidden files are included and
    directories are never returned. Directories named in ``skip_dirs`` are not
    descended into. A missing ``base_dir`` yields an empty set.
    """
    root = Path(base_dir)
    if not root.is_dir():
        return FileSet()

    found: Dict[str, FileRef] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in skip_dirs)
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
        for filename in sorted(filenames):
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if not match_path(rel_path, pattern):
                continue
            absolute = current_dir / filename
            try:
                file_stat = absolute.stat()
            except FileNotFoundError:
                # dangling symlink
                continue
            if not stat.S_ISREG(file_stat.st_mode):
                continue
            found[rel_path] = FileFsRef(fs_path=str(absolute), mode=file_stat.st_mode)
    return FileSet(found)


__all__ = ["glob", "match_path"]
