"""Tests for lambda packaging."""

from __future__ import annotations

import io
import zipfile

import pytest

from nuxtpack.models import FileBlob, FileSet
from nuxtpack.packaging.lambda_zip import PackagingLimitExceeded, create_lambda


def _bundle() -> FileSet:
    return FileSet(
        {
            "now__launcher.js": FileBlob(data=b"launcher"),
            "node_modules/nuxt/index.js": FileBlob(data=b"nuxt"),
            "bin/run": FileBlob(data=b"#!/bin/sh", mode=0o100755),
        }
    )


def test_create_lambda_zips_every_file() -> None:
    unit = create_lambda(_bundle(), handler="now__launcher.launcher", runtime="nodejs8.10")

    with zipfile.ZipFile(io.BytesIO(unit.zip_bytes)) as archive:
        assert archive.namelist() == ["bin/run", "node_modules/nuxt/index.js", "now__launcher.js"]
        assert archive.read("now__launcher.js") == b"launcher"
        assert (archive.getinfo("bin/run").external_attr >> 16) & 0o777 == 0o755
    assert unit.handler == "now__launcher.launcher"
    assert unit.runtime == "nodejs8.10"
    assert unit.file_count == 3
    assert unit.size == len(unit.zip_bytes)


def test_create_lambda_is_deterministic() -> None:
    first = create_lambda(_bundle(), handler="h", runtime="r")
    second = create_lambda(_bundle(), handler="h", runtime="r")

    assert first.zip_bytes == second.zip_bytes


def test_create_lambda_enforces_size_limit() -> None:
    with pytest.raises(PackagingLimitExceeded) as excinfo:
        create_lambda(_bundle(), handler="h", runtime="r", max_size=10, name="index")

    assert excinfo.value.limit == 10
    assert excinfo.value.size > 10
    assert "index" in str(excinfo.value)
