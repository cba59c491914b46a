"""Pure transforms over :class:`~nuxtpack.models.FileSet` values."""

from __future__ import annotations

from typing import Callable, Dict, Mapping

from ..models import FileRef, FileSet

ROOT_DIRECTORY = "."

LOCKFILES = ("package-lock.json", "yarn.lock")


def _as_file_set(files: Mapping[str, FileRef]) -> FileSet:
    return files if isinstance(files, FileSet) else FileSet(files)


def exclude_files(files: Mapping[str, FileRef], matcher: Callable[[str], bool]) -> FileSet:
    """Return a new set without the entries whose path satisfies ``matcher``."""
    return _as_file_set(files).select(lambda path: not matcher(path))


def include_only_entry_directory(files: Mapping[str, FileRef], entry_directory: str) -> FileSet:
    """Keep only the entries that live in ``entry_directory``."""
    if entry_directory == ROOT_DIRECTORY:
        return _as_file_set(files)

    prefix = f"{entry_directory}/"

    def outside(path: str) -> bool:
        return path != entry_directory and not path.startswith(prefix)

    return exclude_files(files, outside)


def rename(files: Mapping[str, FileRef], delegate: Callable[[str], str]) -> FileSet:
    """Return a new set with every path passed through ``delegate``."""
    renamed: Dict[str, FileRef] = {}
    for path, ref in _as_file_set(files).items():
        renamed[delegate(path)] = ref
    return FileSet(renamed)


def move_entry_directory_to_root(files: Mapping[str, FileRef], entry_directory: str) -> FileSet:
    """Strip the leading ``entry_directory/`` from every path.

    Raises ``ValueError`` when a path does not live under the directory;
    callers restrict the set with :func:`include_only_entry_directory` first.
    """
    if entry_directory == ROOT_DIRECTORY:
        return _as_file_set(files)

    prefix = f"{entry_directory}/"

    def delegate(path: str) -> str:
        if not path.startswith(prefix):
            raise ValueError(f"{path} is not inside entry directory {entry_directory}")
        return path[len(prefix):]

    return rename(files, delegate)


def exclude_lockfiles(files: Mapping[str, FileRef]) -> FileSet:
    """Drop package manager lockfiles found at the root of ``files``."""
    return exclude_files(files, lambda path: path in LOCKFILES)


__all__ = [
    "LOCKFILES",
    "ROOT_DIRECTORY",
    "exclude_files",
    "exclude_lockfiles",
    "include_only_entry_directory",
    "move_entry_directory_to_root",
    "rename",
]
