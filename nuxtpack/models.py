"""Core data models shared across nuxtpack components."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

DEFAULT_FILE_MODE = 0o100644

_TYPED_KEYS = frozenset({"dependencies", "devDependencies", "scripts"})


@dataclass(frozen=True)
class FileFsRef:
    """Reference to file content already materialised on disk."""

    fs_path: str
    mode: int = DEFAULT_FILE_MODE

    @property
    def size(self) -> int:
        return Path(self.fs_path).stat().st_size

    def read_bytes(self) -> bytes:
        return Path(self.fs_path).read_bytes()


@dataclass(frozen=True)
class FileBlob:
    """In-memory file content."""

    data: bytes
    mode: int = DEFAULT_FILE_MODE

    def __post_init__(self) -> None:
        if isinstance(self.data, str):
            object.__setattr__(self, "data", self.data.encode("utf-8"))

    @property
    def size(self) -> int:
        return len(self.data)

    def read_bytes(self) -> bytes:
        return self.data


FileRef = Union[FileFsRef, FileBlob]


def normalize_path(path: str) -> str:
    """Return the canonical form of a virtual path or raise ``ValueError``."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if not normalized or normalized == ".":
        raise ValueError("File path must not be empty")
    if normalized.startswith("/"):
        raise ValueError(f"File path must be relative: {path}")
    parts = normalized.split("/")
    if ".." in parts:
        raise ValueError(f"File path must not contain '..': {path}")
    return "/".join(part for part in parts if part not in ("", "."))


class FileSet(Mapping[str, FileRef]):
    """Immutable mapping of virtual ``/``-separated paths to file references.

    Every transform returns a new ``FileSet``; references are shared between
    sets, content is never copied.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, FileRef]] = None) -> None:
        normalized: Dict[str, FileRef] = {}
        for path, ref in (entries or {}).items():
            if not isinstance(ref, (FileFsRef, FileBlob)):
                raise TypeError(f"Unsupported file reference for {path}: {ref!r}")
            key = normalize_path(path)
            if key in normalized:
                raise ValueError(f"Duplicate file path after normalisation: {path} -> {key}")
            normalized[key] = ref
        self._entries = MappingProxyType(dict(sorted(normalized.items())))

    def __getitem__(self, path: str) -> FileRef:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"FileSet({list(self._entries)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self._entries) == dict(other)
        return NotImplemented

    def merge(self, *others: Mapping[str, FileRef]) -> "FileSet":
        """Return a new set where entries from ``others`` win on collision."""
        merged: Dict[str, FileRef] = dict(self._entries)
        for other in others:
            for path, ref in other.items():
                merged[normalize_path(path)] = ref
        return FileSet(merged)

    def __or__(self, other: Mapping[str, FileRef]) -> "FileSet":
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.merge(other)

    def select(self, predicate: Callable[[str], bool]) -> "FileSet":
        """Return the entries whose path satisfies ``predicate``."""
        return FileSet({path: ref for path, ref in self._entries.items() if predicate(path)})


@dataclass
class BuildManifest:
    """Typed view of a ``package.json`` document.

    Fields other than the dependency maps and ``scripts`` are kept in
    ``extra`` so they survive a read/normalise/write cycle unchanged. Values
    inside the maps are kept as parsed, and a typed key holding something
    other than an object is treated as an extra field.
    """

    dependencies: Dict[str, Any] = field(default_factory=dict)
    dev_dependencies: Dict[str, Any] = field(default_factory=dict)
    scripts: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)
    key_order: List[str] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BuildManifest":
        extra = {
            key: value
            for key, value in payload.items()
            if key not in _TYPED_KEYS or not isinstance(value, Mapping)
        }
        return cls(
            dependencies=_as_mapping(payload.get("dependencies")),
            dev_dependencies=_as_mapping(payload.get("devDependencies")),
            scripts=_as_mapping(payload.get("scripts")),
            extra=extra,
            key_order=[str(key) for key in payload],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready document, keeping the original key order."""
        typed: Dict[str, Any] = {"scripts": dict(self.scripts)}
        if self.dependencies or _declared(self, "dependencies"):
            typed["dependencies"] = dict(self.dependencies)
        if self.dev_dependencies or _declared(self, "devDependencies"):
            typed["devDependencies"] = dict(self.dev_dependencies)

        payload: Dict[str, Any] = {}
        for key in self.key_order:
            if key in typed:
                payload[key] = typed.pop(key)
            elif key in self.extra:
                payload[key] = self.extra[key]
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        for key in ("dependencies", "devDependencies", "scripts"):
            if key in typed:
                payload[key] = typed.pop(key)
        return payload


@dataclass(frozen=True)
class Page:
    """A servable route discovered in the client build output."""

    name: str
    source: str

    @classmethod
    def from_output_path(cls, relative_path: str, suffix: str = ".js") -> "Page":
        name = relative_path[: -len(suffix)] if relative_path.endswith(suffix) else relative_path
        return cls(name=name, source=relative_path)

    def serving_path(self, entry_directory: str) -> str:
        return posixpath.normpath(posixpath.join(entry_directory, self.name))


@dataclass(frozen=True)
class Lambda:
    """A packaged, independently invocable compute unit."""

    zip_bytes: bytes = field(repr=False)
    handler: str
    runtime: str
    environment: Mapping[str, str] = field(default_factory=dict)
    file_count: int = 0

    @property
    def size(self) -> int:
        return len(self.zip_bytes)


def _declared(manifest: BuildManifest, key: str) -> bool:
    return key in manifest.key_order and key not in manifest.extra


def _as_mapping(value: Any) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        return {}
    return {str(key): item for key, item in value.items()}


__all__ = [
    "BuildManifest",
    "DEFAULT_FILE_MODE",
    "FileBlob",
    "FileFsRef",
    "FileRef",
    "FileSet",
    "Lambda",
    "Page",
    "normalize_path",
]
