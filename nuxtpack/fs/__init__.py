"""File set transforms and filesystem collaborators."""

from .download import download
from .glob import glob, match_path
from .local import files_from_directory
from .transforms import (
    exclude_files,
    exclude_lockfiles,
    include_only_entry_directory,
    move_entry_directory_to_root,
    rename,
)

__all__ = [
    "download",
    "exclude_files",
    "exclude_lockfiles",
    "files_from_directory",
    "glob",
    "include_only_entry_directory",
    "match_path",
    "move_entry_directory_to_root",
    "rename",
]
