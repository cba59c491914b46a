"""Reading, normalising and writing the project's ``package.json``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from .models import BuildManifest, FileRef

BUILD_SCRIPT = "now-build"
BUILD_COMMAND = "nuxt build --no-generate"
PACKAGE_JSON = "package.json"


class ManifestError(RuntimeError):
    """Raised when ``package.json`` cannot be parsed."""


def read_package_json(files: Mapping[str, FileRef]) -> BuildManifest:
    """Return the manifest found at the root of ``files`` or an empty one."""
    ref = files.get(PACKAGE_JSON)
    if ref is None:
        return BuildManifest()
    try:
        payload = json.loads(ref.read_bytes().decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Failed to parse {PACKAGE_JSON}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ManifestError(f"{PACKAGE_JSON} must contain an object at the root")
    return BuildManifest.from_dict(payload)


def normalize_package_json(manifest: BuildManifest | None = None) -> BuildManifest:
    """Force the build script the packaging pipeline relies on.

    Every other field, including the remaining scripts, passes through.
    """
    source = manifest or BuildManifest()
    scripts = dict(source.scripts)
    scripts[BUILD_SCRIPT] = BUILD_COMMAND
    return BuildManifest(
        dependencies=dict(source.dependencies),
        dev_dependencies=dict(source.dev_dependencies),
        scripts=scripts,
        extra=dict(source.extra),
        key_order=list(source.key_order),
    )


def write_package_json(work_path: Path, manifest: BuildManifest) -> Path:
    path = Path(work_path) / PACKAGE_JSON
    path.write_text(json.dumps(manifest.to_dict(), indent=2), encoding="utf-8")
    return path


__all__ = [
    "BUILD_COMMAND",
    "BUILD_SCRIPT",
    "ManifestError",
    "normalize_package_json",
    "read_package_json",
    "write_package_json",
]
