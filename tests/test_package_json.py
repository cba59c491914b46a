"""Tests for package.json normalisation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nuxtpack.models import BuildManifest, FileBlob, FileSet
from nuxtpack.package_json import (
    BUILD_COMMAND,
    BUILD_SCRIPT,
    ManifestError,
    normalize_package_json,
    read_package_json,
    write_package_json,
)


def test_normalize_empty_manifest_has_only_build_script() -> None:
    manifest = normalize_package_json(BuildManifest.from_dict({}))

    assert manifest.scripts == {BUILD_SCRIPT: BUILD_COMMAND}
    assert normalize_package_json(None).scripts == {BUILD_SCRIPT: BUILD_COMMAND}


def test_normalize_keeps_other_scripts_and_overrides_build_script() -> None:
    source = BuildManifest.from_dict(
        {"scripts": {"test": "x", BUILD_SCRIPT: "something else"}, "name": "app"}
    )

    manifest = normalize_package_json(source)

    assert manifest.scripts == {"test": "x", BUILD_SCRIPT: BUILD_COMMAND}
    assert manifest.extra == {"name": "app"}
    assert source.scripts[BUILD_SCRIPT] == "something else"


def test_normalize_passes_dependencies_through() -> None:
    source = BuildManifest.from_dict(
        {"dependencies": {"nuxt": "2.0.0"}, "devDependencies": {"jest": "23"}}
    )

    manifest = normalize_package_json(source)

    assert manifest.dependencies == {"nuxt": "2.0.0"}
    assert manifest.dev_dependencies == {"jest": "23"}


def test_read_package_json_defaults_when_missing() -> None:
    assert read_package_json(FileSet()) == BuildManifest()


def test_read_package_json_rejects_invalid_documents() -> None:
    files = FileSet({"package.json": FileBlob(data=b"[1, 2]")})
    with pytest.raises(ManifestError):
        read_package_json(files)

    broken = FileSet({"package.json": FileBlob(data=b"{not json")})
    with pytest.raises(ManifestError):
        read_package_json(broken)


def test_read_package_json_accepts_byte_order_mark() -> None:
    files = FileSet({"package.json": FileBlob(data=b"\xef\xbb\xbf{\"name\": \"app\"}")})

    assert read_package_json(files).extra == {"name": "app"}


def test_write_package_json_uses_two_space_indent(tmp_path: Path) -> None:
    manifest = normalize_package_json(BuildManifest.from_dict({"name": "app"}))

    path = write_package_json(tmp_path, manifest)

    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "name": "app"')
    assert json.loads(text)["scripts"] == {BUILD_SCRIPT: BUILD_COMMAND}
