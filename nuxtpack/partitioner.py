"""Split the post-build file set into one self-contained bundle per page."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from .fs.glob import match_path
from .fs.transforms import (
    exclude_files,
    include_only_entry_directory,
    move_entry_directory_to_root,
)
from .launcher import BRIDGE_FILENAME, LAUNCHER_FILENAME
from .logging import get_logger
from .models import FileRef, FileSet, Page

DIST_DIR = ".nuxt/dist"
CLIENT_DIR = f"{DIST_DIR}/client"
SERVER_DIR = f"{DIST_DIR}/server"
PAGES_DIR = f"{CLIENT_DIR}/pages"
NODE_MODULES_DIR = "node_modules"
NODE_MODULES_CACHE = "node_modules/.cache"
NUXT_CONFIG = "nuxt.config.js"
PAGE_SUFFIX = ".js"

# (bundle path, source path in the build output)
SHARED_FILES: Tuple[Tuple[str, str], ...] = (
    (f"{CLIENT_DIR}/app.js", f"{CLIENT_DIR}/app.js"),
    (f"{CLIENT_DIR}/commons.app.js", f"{CLIENT_DIR}/commons.app.js"),
    (f"{CLIENT_DIR}/runtime.js", f"{CLIENT_DIR}/runtime.js"),
    (f"{SERVER_DIR}/index.spa.html", f"{SERVER_DIR}/index.spa.html"),
    # Nuxt renders the SSR shell from the SPA template; both keys carry the same file.
    (f"{SERVER_DIR}/index.ssr.html", f"{SERVER_DIR}/index.spa.html"),
    (f"{SERVER_DIR}/vue-ssr-client-manifest.json", f"{SERVER_DIR}/vue-ssr-client-manifest.json"),
    (f"{SERVER_DIR}/server-bundle.json", f"{SERVER_DIR}/server-bundle.json"),
)


class MissingPageArtifact(RuntimeError):
    """Raised when a page's own client bundle is absent from the build output."""

    def __init__(self, page: Page, path: str) -> None:
        self.page = page
        self.path = path
        super().__init__(f"Build output for page {page.name!r} not found at {path}")


@dataclass(frozen=True)
class Bundle:
    """Files packaged into the lambda serving a single page."""

    page: Page
    serving_path: str
    files: FileSet


def page_output_path(page: Page) -> str:
    return f"{PAGES_DIR}/{page.source}"


def discover_pages(files: Mapping[str, FileRef]) -> List[Page]:
    """Return the pages emitted into the client pages directory, sorted by name."""
    page_files = move_entry_directory_to_root(
        include_only_entry_directory(files, PAGES_DIR), PAGES_DIR
    )
    pages = [
        Page.from_output_path(path, PAGE_SUFFIX)
        for path in page_files
        if match_path(path, f"**/*{PAGE_SUFFIX}")
    ]
    return sorted(pages, key=lambda page: page.name)


class BundlePartitioner:
    """Computes the per-page bundles from a read-only build output.

    The partitioner never mutates the build output; every bundle is a fresh
    :class:`FileSet` sharing references with it.
    """

    def __init__(
        self,
        launcher: FileRef,
        bridge: FileRef,
        *,
        shared_files: Sequence[Tuple[str, str]] = SHARED_FILES,
    ) -> None:
        self.launcher = launcher
        self.bridge = bridge
        self.shared_files = tuple(shared_files)
        self.logger = get_logger("partitioner")

    def carry_over(self, files: Mapping[str, FileRef]) -> FileSet:
        """Files every bundle needs regardless of the page it serves."""
        node_modules = exclude_files(
            include_only_entry_directory(files, NODE_MODULES_DIR),
            lambda path: path == NODE_MODULES_CACHE or path.startswith(f"{NODE_MODULES_CACHE}/"),
        )
        dist_root = FileSet(files).select(lambda path: match_path(path, f"{DIST_DIR}/*"))
        carried = node_modules.merge(dist_root, {BRIDGE_FILENAME: self.bridge})
        config = files.get(NUXT_CONFIG)
        if config is not None:
            carried = carried.merge({NUXT_CONFIG: config})
        return carried

    def shared(self, files: Mapping[str, FileRef]) -> FileSet:
        """Framework runtime files shared by every page, missing ones omitted."""
        found: Dict[str, FileRef] = {}
        for target, source in self.shared_files:
            ref = files.get(source)
            if ref is None:
                self.logger.debug("Shared artifact %s missing from build output; omitting", source)
                continue
            found[target] = ref
        return FileSet(found)

    def assemble(
        self,
        page: Page,
        files: Mapping[str, FileRef],
        *,
        entry_directory: str,
        carry_over: FileSet,
        shared: FileSet,
    ) -> Bundle:
        """Build the bundle for ``page`` from precomputed carry-over and shared files."""
        output_path = page_output_path(page)
        page_ref = files.get(output_path)
        if page_ref is None:
            raise MissingPageArtifact(page, output_path)
        bundle = carry_over.merge(
            shared,
            {output_path: page_ref},
            {LAUNCHER_FILENAME: self.launcher},
        )
        return Bundle(page=page, serving_path=page.serving_path(entry_directory), files=bundle)

    def plan(
        self,
        files: Mapping[str, FileRef],
        pages: Iterable[Page],
        *,
        entry_directory: str = ".",
    ) -> Dict[str, Callable[[], Bundle]]:
        """Return a deferred bundle builder per page keyed by serving path.

        Carry-over and shared files are computed once up front. Each builder
        assembles its page on call, so callers decide where the work runs and
        a missing page artifact only fails that page.
        """
        build_output = FileSet(files)
        carry_over = self.carry_over(build_output)
        shared = self.shared(build_output)
        builders: Dict[str, Callable[[], Bundle]] = {}
        for page in pages:
            builders[page.serving_path(entry_directory)] = partial(
                self.assemble,
                page,
                build_output,
                entry_directory=entry_directory,
                carry_over=carry_over,
                shared=shared,
            )
        return dict(sorted(builders.items()))

    def partition(
        self,
        files: Mapping[str, FileRef],
        pages: Iterable[Page],
        *,
        entry_directory: str = ".",
    ) -> Dict[str, Bundle]:
        """Return one bundle per page keyed by serving path."""
        planned = self.plan(files, pages, entry_directory=entry_directory)
        return {serving_path: build() for serving_path, build in planned.items()}

__all__ = [
    "Bundle",
    "BundlePartitioner",
    "MissingPageArtifact",
    "PAGES_DIR",
    "SHARED_FILES",
    "discover_pages",
    "page_output_path",
]
