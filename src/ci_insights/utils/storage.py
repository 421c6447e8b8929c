"""
This module provides the file access layer used by every pipeline stage.

Components never touch `os` or `open` directly; they receive a `Storage`
instance and explicit root paths. Two implementations are provided:

1.  **LocalStorage**: Reads and writes the real filesystem.
2.  **MemoryStorage**: Keeps a mapping of normalized path to text content, so
    the whole pipeline can be exercised without touching the disk.
"""

import logging
import os
from typing import Dict, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """The minimal set of file operations the pipeline relies on."""

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def list_dirs(self, path: str) -> List[str]: ...

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, content: str) -> None: ...

    def makedirs(self, path: str) -> None: ...


class LocalStorage:
    """Storage backed by the local filesystem."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def list_dirs(self, path: str) -> List[str]:
        """Returns the names of the immediate subdirectories of `path`."""
        return [
            name for name in os.listdir(path) if os.path.isdir(os.path.join(path, name))
        ]

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write_text(self, path: str, content: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

    def makedirs(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)


class MemoryStorage:
    """
    Storage backed by an in-memory mapping of path to content.

    Directories are implied by the files stored beneath them, or created
    explicitly with `makedirs`. Writing a file implicitly creates its parents,
    unlike the local filesystem, which keeps test setup short.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = {}
        self._dirs: Set[str] = set()
        for path, content in (files or {}).items():
            self.write_text(path, content)

    @staticmethod
    def _norm(path: str) -> str:
        return os.path.normpath(path)

    def _add_parents(self, path: str) -> None:
        parent = os.path.dirname(path)
        while parent and parent not in self._dirs and parent != os.sep:
            self._dirs.add(parent)
            parent = os.path.dirname(parent)

    def exists(self, path: str) -> bool:
        key = self._norm(path)
        return key in self.files or key in self._dirs

    def is_dir(self, path: str) -> bool:
        return self._norm(path) in self._dirs

    def list_dirs(self, path: str) -> List[str]:
        key = self._norm(path)
        if key not in self._dirs:
            raise FileNotFoundError(f"No such directory: {path}")
        return sorted(
            os.path.basename(d) for d in self._dirs if os.path.dirname(d) == key
        )

    def read_text(self, path: str) -> str:
        try:
            return self.files[self._norm(path)]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    def write_text(self, path: str, content: str) -> None:
        key = self._norm(path)
        self._add_parents(key)
        self.files[key] = content

    def makedirs(self, path: str) -> None:
        key = self._norm(path)
        self._dirs.add(key)
        self._add_parents(key)
