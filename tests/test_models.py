"""Tests for nuxtpack.models."""

from __future__ import annotations

from pathlib import Path

import pytest

from nuxtpack.models import BuildManifest, FileBlob, FileFsRef, FileSet, Page


def test_file_set_normalises_paths_and_orders_keys() -> None:
    blob = FileBlob(data=b"x")
    files = FileSet({"b\\c.js": blob, "./a.js": blob})

    assert list(files) == ["a.js", "b/c.js"]


@pytest.mark.parametrize("path", ["/etc/passwd", "a/../b.js", "", "."])
def test_file_set_rejects_unsafe_paths(path: str) -> None:
    with pytest.raises(ValueError):
        FileSet({path: FileBlob(data=b"")})


def test_file_set_rejects_keys_colliding_after_normalisation() -> None:
    with pytest.raises(ValueError):
        FileSet({"a.js": FileBlob(data=b"a"), "./a.js": FileBlob(data=b"b")})


def test_file_set_rejects_non_references() -> None:
    with pytest.raises(TypeError):
        FileSet({"a.js": "not a ref"})  # type: ignore[dict-item]


def test_file_set_absent_lookup_returns_none() -> None:
    assert FileSet().get("missing.js") is None


def test_merge_normalises_plain_mapping_keys() -> None:
    ref = FileBlob(data=b"new")

    merged = FileSet({"a.js": FileBlob(data=b"old")}).merge({"./a.js": ref})

    assert list(merged) == ["a.js"]
    assert merged["a.js"] is ref


def test_merge_prefers_right_hand_side_and_keeps_inputs() -> None:
    left_ref = FileBlob(data=b"left")
    right_ref = FileBlob(data=b"right")
    left = FileSet({"shared.js": left_ref, "left.js": left_ref})
    right = FileSet({"shared.js": right_ref})

    merged = left | right

    assert merged["shared.js"] is right_ref
    assert merged["left.js"] is left_ref
    assert left["shared.js"] is left_ref


def test_file_set_has_no_mutation_api() -> None:
    files = FileSet({"a.js": FileBlob(data=b"a")})
    with pytest.raises(TypeError):
        files["b.js"] = FileBlob(data=b"b")  # type: ignore[index]


def test_file_blob_accepts_text() -> None:
    blob = FileBlob(data="héllo")  # type: ignore[arg-type]
    assert blob.data == "héllo".encode("utf-8")
    assert blob.size == len(blob.data)


def test_file_fs_ref_reads_from_disk(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_bytes(b"content")
    ref = FileFsRef(fs_path=str(target))

    assert ref.read_bytes() == b"content"
    assert ref.size == 7


def test_build_manifest_round_trip_keeps_key_order() -> None:
    payload = {
        "name": "app",
        "scripts": {"dev": "nuxt"},
        "dependencies": {"nuxt": "^2.0.0"},
        "private": True,
    }

    manifest = BuildManifest.from_dict(payload)

    assert manifest.dependencies == {"nuxt": "^2.0.0"}
    assert manifest.extra == {"name": "app", "private": True}
    assert list(manifest.to_dict()) == ["name", "scripts", "dependencies", "private"]


def test_build_manifest_keeps_dependency_values_as_parsed() -> None:
    payload = {"dependencies": {"x": None, "nuxt": "^2.0.0"}, "devDependencies": "oops"}

    document = BuildManifest.from_dict(payload).to_dict()

    assert document["dependencies"] == {"x": None, "nuxt": "^2.0.0"}
    assert document["devDependencies"] == "oops"


def test_page_serving_path_joins_entry_directory() -> None:
    page = Page.from_output_path("users/_id.js")

    assert page.name == "users/_id"
    assert page.serving_path(".") == "users/_id"
    assert page.serving_path("www") == "www/users/_id"
