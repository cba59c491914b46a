"""Configuration loading for nuxtpack (.nuxtpack.yml)."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".nuxtpack.yml"
AUTH_TOKEN_ENV = "NPM_AUTH_TOKEN"

DEFAULT_RUNTIME = "nodejs8.10"
DEFAULT_MAX_LAMBDA_SIZE = "50mb"
DEFAULT_INSTALL_FLAGS = ("--prefer-offline",)
PACKAGE_MANAGERS = ("npm", "yarn")

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(b|kb|mb|gb)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"b": 1, "kb": 1024, "mb": 1024**2, "gb": 1024**3}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BuilderConfig:
    """Settings that drive a build, loaded from .nuxtpack.yml and the environment."""

    runtime: str = DEFAULT_RUNTIME
    max_lambda_size: int = 50 * 1024**2  # DEFAULT_MAX_LAMBDA_SIZE
    max_workers: Optional[int] = None
    fail_fast: bool = False
    package_manager: str = "npm"
    install_flags: List[str] = field(default_factory=lambda: list(DEFAULT_INSTALL_FLAGS))
    npm_auth_token: Optional[str] = field(default=None, repr=False)


def parse_size(value: Any) -> int:
    """Convert ``"50mb"``-style sizes (or plain integers) to bytes."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid size: {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise ConfigError(f"Size must be positive: {value}")
        return value
    if isinstance(value, str):
        match = _SIZE_PATTERN.match(value)
        if match:
            number = float(match.group(1))
            unit = (match.group(2) or "b").lower()
            size = int(number * _SIZE_UNITS[unit])
            if size > 0:
                return size
    raise ConfigError(f"Invalid size: {value!r}")


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> BuilderConfig:
    """Load configuration from disk and pick up the registry token from ``environ``."""
    env = os.environ if environ is None else environ
    token = env.get(AUTH_TOKEN_ENV) or None

    data: Dict[str, Any] = {}
    if config_path is not None:
        config_file = _resolve_config_path(config_path)
        if config_file.exists():
            data = _read_config(config_file)

    config = BuilderConfig(npm_auth_token=token)

    runtime = _as_str(data.get("runtime"))
    if runtime:
        config.runtime = runtime

    if data.get("max_lambda_size") is not None:
        config.max_lambda_size = parse_size(data["max_lambda_size"])

    max_workers = data.get("max_workers")
    if max_workers is not None:
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigError(f"max_workers must be a positive integer, got {max_workers!r}")
        config.max_workers = max_workers

    fail_fast = _as_bool(data.get("fail_fast"))
    if fail_fast is not None:
        config.fail_fast = fail_fast

    manager = _as_str(data.get("package_manager"))
    if manager:
        if manager not in PACKAGE_MANAGERS:
            raise ConfigError(
                f"package_manager must be one of {', '.join(PACKAGE_MANAGERS)}, got {manager!r}"
            )
        config.package_manager = manager

    if "install_flags" in data:
        config.install_flags = _as_str_list(data.get("install_flags"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AUTH_TOKEN_ENV",
    "BuilderConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "load_config",
    "parse_size",
]
