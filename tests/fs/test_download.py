"""Tests for materialising file sets on disk."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from nuxtpack.fs.download import download
from nuxtpack.models import FileBlob, FileFsRef, FileSet


def test_download_writes_blobs_and_copies_fs_refs(tmp_path: Path) -> None:
    source = tmp_path / "source.txt"
    source.write_text("from disk", encoding="utf-8")
    files = FileSet(
        {
            "nested/blob.txt": FileBlob(data=b"from memory"),
            "copied.txt": FileFsRef(fs_path=str(source)),
        }
    )

    result = download(files, tmp_path / "out")

    assert (tmp_path / "out" / "nested" / "blob.txt").read_bytes() == b"from memory"
    assert (tmp_path / "out" / "copied.txt").read_text(encoding="utf-8") == "from disk"
    assert list(result) == ["copied.txt", "nested/blob.txt"]
    assert Path(result["copied.txt"].fs_path) == tmp_path / "out" / "copied.txt"  # type: ignore[union-attr]


def test_download_applies_file_mode(tmp_path: Path) -> None:
    files = FileSet({"bin/run.sh": FileBlob(data=b"#!/bin/sh\n", mode=0o100755)})

    download(files, tmp_path)

    mode = os.stat(tmp_path / "bin" / "run.sh").st_mode
    assert stat.S_IMODE(mode) == 0o755


def test_download_onto_itself_keeps_content(tmp_path: Path) -> None:
    target = tmp_path / "same.txt"
    target.write_text("keep", encoding="utf-8")

    download(FileSet({"same.txt": FileFsRef(fs_path=str(target))}), tmp_path)

    assert target.read_text(encoding="utf-8") == "keep"
