"""Memoizing filesystem access for source-tree discovery.

Framework detection asks the same questions about the same files many times
("does package.json exist?", "what is in it?"). RepositoryFileSystem answers
each question from disk at most once per path and replays the answer after
that. Read errors are replayed too. The tree is assumed not to change while
an instance is in use.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Interface for existence and content queries relative to a root."""

    def exists(self, path: str) -> bool:
        """Return True if the path exists."""
        ...

    def read(self, path: str) -> str:
        """Return the file's text content."""
        ...


class RepositoryFileSystem:
    """Find files or read contents present in a repository checkout."""

    def __init__(self, cwd: str | Path) -> None:
        self.cwd = Path(cwd)
        self._exists_cache: dict[str, bool] = {}
        self._content_cache: dict[str, str] = {}
        self._read_error_cache: dict[str, OSError] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(path, threading.Lock())

    def exists(self, path: str) -> bool:
        """
        Return whether path exists under the root.

        A missing path is not an error. Any other OS error (for example a
        permission error on a parent directory) is raised.
        """
        if path in self._content_cache:
            return True
        if path in self._exists_cache:
            return self._exists_cache[path]

        with self._lock_for(path):
            if path not in self._exists_cache:
                try:
                    os.stat(self.cwd / path)
                    found = True
                except (FileNotFoundError, NotADirectoryError):
                    found = False
                except OSError as exc:
                    logger.error(
                        "Error occurred while searching for file %s: %s", path, exc
                    )
                    raise
                self._exists_cache[path] = found
        return self._exists_cache[path]

    def read(self, path: str) -> str:
        """
        Return the UTF-8 content of path.

        Undecodable bytes are replaced with U+FFFD rather than raising.

        The first failure for a path is cached, and later calls raise the
        same exception without touching the filesystem.
        """
        cached_error = self._read_error_cache.get(path)
        if cached_error is not None:
            raise cached_error
        if path in self._content_cache:
            return self._content_cache[path]

        with self._lock_for(path):
            cached_error = self._read_error_cache.get(path)
            if cached_error is not None:
                raise cached_error
            if path not in self._content_cache:
                try:
                    self._content_cache[path] = (self.cwd / path).read_text(
                        encoding="utf-8", errors="replace"
                    )
                except FileNotFoundError as exc:
                    self._read_error_cache[path] = exc
                    logger.debug("File %s does not exist", path)
                    raise
                except OSError as exc:
                    self._read_error_cache[path] = exc
                    logger.error(
                        "Error occurred while reading file contents of %s: %s",
                        path,
                        exc,
                    )
                    raise
        return self._content_cache[path]


def read_or_none(fs: FileSystem, path: str) -> str | None:
    """Read a file, returning None if it does not exist."""
    try:
        return fs.read(path)
    except FileNotFoundError:
        return None
    except OSError:
        logger.error("Unknown error occurred while trying to read file %s.", path)
        raise
