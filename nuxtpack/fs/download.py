"""Materialise a :class:`~nuxtpack.models.FileSet` onto the local filesystem."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Dict, Mapping

from ..logging import get_logger
from ..models import FileBlob, FileFsRef, FileRef, FileSet

_logger = get_logger("fs.download")


def _write_ref(ref: FileRef, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(ref, FileFsRef):
        source = Path(ref.fs_path)
        if destination.exists() and source.resolve() == destination.resolve():
            return
        shutil.copyfile(source, destination)
    elif isinstance(ref, FileBlob):
        destination.write_bytes(ref.data)
    else:  # pragma: no cover - FileSet rejects other reference types
        raise TypeError(f"Unsupported file reference: {ref!r}")
    os.chmod(destination, ref.mode & 0o7777)


def download(files: Mapping[str, FileRef], destination: Path | str) -> FileSet:
    """Write every entry of ``files`` below ``destination``.

    Returns a new set pointing at the materialised copies.
    """
    root = Path(destination)
    root.mkdir(parents=True, exist_ok=True)
    downloaded: Dict[str, FileRef] = {}
    for rel_path, ref in FileSet(files).items():
        target = root / rel_path
        _write_ref(ref, target)
        downloaded[rel_path] = FileFsRef(fs_path=str(target), mode=ref.mode)
    _logger.debug("Downloaded %d files into %s", len(downloaded), root)
    return FileSet(downloaded)


__all__ = ["download"]
