"""Entry shim assets copied into every lambda."""

from __future__ import annotations

from importlib import resources

from ..models import FileBlob

LAUNCHER_FILENAME = "now__launcher.js"
BRIDGE_FILENAME = "now__bridge.js"
LAUNCHER_HANDLER = "now__launcher.launcher"


def _read_asset(name: str) -> bytes:
    return resources.files(__name__).joinpath(name).read_bytes()


def launcher_blob() -> FileBlob:
    """Return the generated shim adapting the Nuxt renderer to the lambda contract."""
    return FileBlob(data=_read_asset("launcher.js"))


def bridge_blob() -> FileBlob:
    """Return the bootstrap that forwards lambda events to the local HTTP server."""
    return FileBlob(data=_read_asset("bridge.js"))


__all__ = [
    "BRIDGE_FILENAME",
    "LAUNCHER_FILENAME",
    "LAUNCHER_HANDLER",
    "bridge_blob",
    "launcher_blob",
]
