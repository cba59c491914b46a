"""Package a bundle of files into a deployable lambda archive."""

from __future__ import annotations

import io
import zipfile
from typing import Mapping, Optional

from ..models import FileRef, FileSet, Lambda

# Fixed timestamp keeps archives byte-identical across builds.
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class PackagingLimitExceeded(RuntimeError):
    """Raised when an assembled lambda archive is larger than allowed."""

    def __init__(self, size: int, limit: int, name: str | None = None) -> None:
        self.size = size
        self.limit = limit
        self.name = name
        label = f"Lambda {name!r}" if name else "Lambda"
        super().__init__(f"{label} is {size} bytes, exceeding the {limit} byte limit")


def _zip_files(files: FileSet) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path, ref in files.items():
            info = zipfile.ZipInfo(path, date_time=_ZIP_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.create_system = 3
            info.external_attr = (ref.mode & 0xFFFF) << 16
            archive.writestr(info, ref.read_bytes())
    return buffer.getvalue()


def create_lambda(
    files: Mapping[str, FileRef],
    *,
    handler: str,
    runtime: str,
    environment: Optional[Mapping[str, str]] = None,
    max_size: Optional[int] = None,
    name: str | None = None,
) -> Lambda:
    """Zip ``files`` into a :class:`Lambda`.

    Raises :class:`PackagingLimitExceeded` when ``max_size`` is set and the
    archive is larger.
    """
    bundle = files if isinstance(files, FileSet) else FileSet(files)
    zip_bytes = _zip_files(bundle)
    if max_size is not None and len(zip_bytes) > max_size:
        raise PackagingLimitExceeded(len(zip_bytes), max_size, name)
    return Lambda(
        zip_bytes=zip_bytes,
        handler=handler,
        runtime=runtime,
        environment=dict(environment or {}),
        file_count=len(bundle),
    )


__all__ = ["PackagingLimitExceeded", "create_lambda"]
