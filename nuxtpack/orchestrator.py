"""Pipeline orchestration for the build and prepare-cache flows."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from .config import BuilderConfig
from .entrypoint import entry_directory, validate_entrypoint
from .fs.download import download
from .fs.glob import glob
from .fs.transforms import (
    exclude_lockfiles,
    include_only_entry_directory,
    move_entry_directory_to_root,
)
from .launcher import LAUNCHER_HANDLER, bridge_blob, launcher_blob
from .logging import get_logger, page_logger
from .models import FileRef, FileSet, Lambda, Page
from .npm.runner import NpmRunner, npm_auth
from .package_json import BUILD_SCRIPT, normalize_package_json, read_package_json, write_package_json
from .packaging.lambda_zip import create_lambda
from .partitioner import SERVER_DIR, Bundle, BundlePartitioner, discover_pages

Packager = Callable[..., Lambda]

# Paths returned from prepare_cache, relative to the cache directory.
CACHE_PATTERNS = (
    f"{SERVER_DIR}/index.spa.html",
    f"{SERVER_DIR}/index.ssr.html",
    f"{SERVER_DIR}/vue-ssr-client-manifest.json",
    f"{SERVER_DIR}/server-bundle.json",
    "node_modules/**",
    "yarn.lock",
)


class BuildError(RuntimeError):
    """Raised when one or more pages failed to package.

    ``failures`` maps each failed serving path to its exception; ``lambdas``
    holds the pages that did package.
    """

    def __init__(
        self,
        failures: Mapping[str, BaseException],
        lambdas: Optional[Mapping[str, Lambda]] = None,
    ) -> None:
        self.failures = dict(sorted(failures.items()))
        self.lambdas = dict(lambdas or {})
        details = "; ".join(f"{path}: {exc}" for path, exc in self.failures.items())
        super().__init__(f"{len(self.failures)} page(s) failed to package: {details}")


class Orchestrator:
    """Coordinates the install, build and packaging steps for a Nuxt project."""

    def __init__(
        self,
        config: BuilderConfig | None = None,
        npm_runner: NpmRunner | None = None,
        partitioner: BundlePartitioner | None = None,
        packager: Packager | None = None,
    ) -> None:
        self.config = config or BuilderConfig()
        self.npm = npm_runner or NpmRunner(package_manager=self.config.package_manager)
        self.partitioner = partitioner or BundlePartitioner(launcher_blob(), bridge_blob())
        self.packager = packager or create_lambda
        self.logger = get_logger("orchestrator")

    def build(
        self,
        files: Mapping[str, FileRef],
        work_path: Path | str,
        entrypoint: str,
    ) -> Dict[str, Lambda]:
        """Build the project in ``work_path`` and return lambdas keyed by serving path."""
        self.logger.info("Entrypoint %s", entrypoint)
        validate_entrypoint(entrypoint)
        work_dir = Path(work_path)
        entry_dir = entry_directory(entrypoint)

        self.logger.info("Downloading user files...")
        downloaded = download(self._user_files(files, entry_dir), work_dir)

        self.logger.info("Normalizing package.json")
        manifest = normalize_package_json(read_package_json(downloaded))
        self.logger.debug("Normalized package.json result: %s", manifest.to_dict())
        write_package_json(work_dir, manifest)

        with npm_auth(work_dir, self.config.npm_auth_token):
            self.npm.install(work_dir, self.config.install_flags)
            self.logger.info("Running user script...")
            self.npm.run_script(work_dir, BUILD_SCRIPT)
            self.npm.install(work_dir, [*self.config.install_flags, "--production"])

        files_after_build = glob("**", work_dir)
        self.logger.info("Preparing lambda files...")
        pages = discover_pages(files_after_build)
        self.logger.info("Discovered %d page(s)", len(pages))
        return self._package_pages(files_after_build, pages, entry_dir)

    def prepare_cache(
        self,
        files: Mapping[str, FileRef],
        entrypoint: str,
        cache_path: Path | str,
        work_path: Path | str,
    ) -> FileSet:
        """Return the build output worth persisting between builds."""
        cache_dir = Path(cache_path)
        work_dir = Path(work_path)
        entry_dir = entry_directory(entrypoint)

        self.logger.info("Downloading user files...")
        download(self._user_files(files, entry_dir), work_dir)
        download(glob(".nuxt/**", work_dir), cache_dir)
        download(glob("node_modules/**", work_dir), cache_dir)

        self.logger.debug(".nuxt folder contents: %s", list(glob(".nuxt/**", cache_dir)))
        self.logger.debug(
            ".cache folder contents: %s", list(glob("node_modules/.cache/**", cache_dir))
        )

        with npm_auth(cache_dir, self.config.npm_auth_token):
            self.npm.install(cache_dir)

        cached = FileSet()
        for pattern in CACHE_PATTERNS:
            cached = cached | glob(pattern, cache_dir)
        return cached

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _user_files(files: Mapping[str, FileRef], entry_dir: str) -> FileSet:
        only_entry = include_only_entry_directory(files, entry_dir)
        rooted = move_entry_directory_to_root(only_entry, entry_dir)
        return exclude_lockfiles(rooted)

    def _package_pages(
        self,
        files_after_build: FileSet,
        pages: List[Page],
        entry_dir: str,
    ) -> Dict[str, Lambda]:
        if not pages:
            return {}

        planned = self.partitioner.plan(files_after_build, pages, entry_directory=entry_dir)

        lambdas: Dict[str, Lambda] = {}
        failures: Dict[str, BaseException] = {}
        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="nuxtpack-page"
        ) as executor:
            futures: Dict[Future[Lambda], str] = {
                executor.submit(self._package_bundle, build): serving_path
                for serving_path, build in planned.items()
            }
            if self.config.fail_fast:
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
                for future in pending:
                    future.cancel()
                for future in done:
                    exc = future.exception()
                    if exc is not None:
                        raise exc
            for future, serving_path in futures.items():
                exc = future.exception()
                if exc is not None:
                    page_logger("orchestrator", serving_path).error("Failed to create lambda: %s", exc)
                    failures[serving_path] = exc
                else:
                    lambdas[serving_path] = future.result()

        if failures:
            raise BuildError(failures, lambdas)
        return dict(sorted(lambdas.items()))

    def _package_bundle(self, build: Callable[[], Bundle]) -> Lambda:
        bundle = build()
        logger = page_logger("orchestrator", bundle.serving_path)
        logger.info('Creating lambda for page: "%s"...', bundle.page.source)
        result = self.packager(
            bundle.files,
            handler=LAUNCHER_HANDLER,
            runtime=self.config.runtime,
            max_size=self.config.max_lambda_size,
            name=bundle.serving_path,
        )
        logger.info('Created lambda for page: "%s"', bundle.page.source)
        return result


__all__ = ["BuildError", "Orchestrator"]
