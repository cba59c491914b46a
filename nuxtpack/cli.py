"""CLI entrypoints for nuxtpack commands."""

from __future__ import annotations

import argparse
import sys
import tempfile
from pathlib import Path
from typing import Dict

from .config import CONFIG_FILENAME, ConfigError, load_config
from .entrypoint import InvalidEntrypoint
from .fs.local import files_from_directory
from .logging import configure_logging
from .models import Lambda
from .orchestrator import BuildError, Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project source tree (defaults to current directory).",
    )
    parser.add_argument(
        "--entrypoint",
        default="package.json",
        help="Manifest selecting the app inside the tree (package.json or nuxt.config.js).",
    )
    parser.add_argument(
        "--work-path",
        type=Path,
        default=None,
        help="Directory to build in (defaults to a temporary directory).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to {CONFIG_FILENAME} (defaults to the project root).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nuxtpack",
        description="Package a Nuxt application into one lambda per page.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs, with thread and page fields, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Install, build and package every page into a lambda archive.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_project_options(build_parser)
    build_parser.add_argument(
        "--output",
        type=Path,
        default=Path("dist/lambdas"),
        help="Directory receiving one zip per page.",
    )

    cache_parser = subparsers.add_parser(
        "prepare-cache",
        help="Collect build output worth persisting between builds.",
    )
    _add_verbose_option(cache_parser, suppress_default=True)
    _add_project_options(cache_parser)
    cache_parser.add_argument(
        "--cache-path",
        type=Path,
        required=True,
        help="Directory receiving the cached files.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for nuxtpack commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    try:
        project = Path(args.path).expanduser().resolve()
        config = load_config(args.config or project)
        files = files_from_directory(project)
    except (ConfigError, FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = Orchestrator(config=config)

    with tempfile.TemporaryDirectory(prefix="nuxtpack-") as scratch:
        work_path = args.work_path or Path(scratch)
        if args.command == "build":
            try:
                lambdas = orchestrator.build(files, work_path, args.entrypoint)
            except InvalidEntrypoint as exc:
                parser.exit(1, f"{exc}\n")
            except BuildError as exc:
                _write_lambdas(exc.lambdas, args.output)
                parser.exit(1, f"nuxtpack build failed: {exc}\n")
            except RuntimeError as exc:
                parser.exit(1, f"nuxtpack build failed: {exc}\nRun with --verbose for more details.\n")
            written = _write_lambdas(lambdas, args.output)
            if not written:
                print("No pages found; nothing to package")
            for serving_path, target in written.items():
                print(f"{serving_path} -> {_relativize(target)}")
        elif args.command == "prepare-cache":
            try:
                cached = orchestrator.prepare_cache(
                    files, args.entrypoint, args.cache_path, work_path
                )
            except RuntimeError as exc:
                parser.exit(1, f"nuxtpack prepare-cache failed: {exc}\n")
            for cached_path in cached:
                print(cached_path)
            print(f"Cached {len(cached)} files in {_relativize(args.cache_path)}")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")


def _write_lambdas(lambdas: Dict[str, Lambda], output: Path) -> Dict[str, Path]:
    written: Dict[str, Path] = {}
    for serving_path, unit in lambdas.items():
        target = output / f"{serving_path}.zip"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(unit.zip_bytes)
        written[serving_path] = target
    return written


def _relativize(path: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
