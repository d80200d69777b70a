"""
Directory traversal for lsext
Yields the regular files below a root, applying hidden and ignore-file filters
"""

import os
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .ignore_rules import IgnoreStack

logger = logging.getLogger(__name__)


class RootPathError(OSError):
    """The walk root does not exist or cannot be read"""


class FileWalker:
    """Recursive walk over a directory tree.

    Entries that fail while being inspected (permission denied, vanished
    files, broken metadata) are logged and skipped; only a bad root is fatal.
    """

    def __init__(self, root: Union[str, Path] = ".", include_all: bool = False):
        """Initialize the walker.

        Args:
            root: Directory to start from (a regular file is reported as itself)
            include_all: Disable hidden and ignore-file filtering
        """
        self.root = Path(root)
        self.include_all = include_all
        self.files_found = 0
        self.skipped_errors = 0

    def walk(self) -> Iterator[str]:
        """Yield the path of every regular file reachable from the root"""
        root = os.path.abspath(self.root)

        if not os.path.exists(root):
            raise RootPathError(f"Directory '{self.root}' does not exist")

        if not os.path.isdir(root):
            if os.path.isfile(root):
                self.files_found += 1
                yield root
            return

        logger.debug(f"Walking {root} (include_all={self.include_all})")
        ignores = None if self.include_all else IgnoreStack.for_root(root)
        pending: List[Tuple[str, Optional[IgnoreStack]]] = [(root, ignores)]

        while pending:
            directory, parent_ignores = pending.pop()
            try:
                with os.scandir(directory) as it:
                    entries = list(it)
            except OSError as e:
                if directory == root:
                    raise RootPathError(f"Cannot read directory '{self.root}': {e.strerror}") from e
                self._skip(directory, e)
                continue

            ignores = parent_ignores.descend(directory) if parent_ignores is not None else None

            for entry in entries:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_file = not is_dir and entry.is_file(follow_symlinks=False)
                except OSError as e:
                    self._skip(entry.path, e)
                    continue

                if ignores is not None and self._is_filtered(entry, is_dir, ignores):
                    continue

                if is_dir:
                    pending.append((entry.path, ignores))
                elif is_file:
                    self.files_found += 1
                    yield entry.path

        logger.info(f"Found {self.files_found} files, skipped {self.skipped_errors} unreadable entries")

    def _is_filtered(self, entry: os.DirEntry, is_dir: bool, ignores: IgnoreStack) -> bool:
        if entry.name.startswith("."):
            return True
        if ignores.is_ignored(entry.path, is_dir):
            logger.debug(f"Ignored by rule: {entry.path}")
            return True
        return False

    def _skip(self, path: str, error: OSError) -> None:
        self.skipped_errors += 1
        logger.debug(f"Skipping {path}: {error}")
