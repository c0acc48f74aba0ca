"""Filesystem abstraction for testability.

This module provides a filesystem abstraction that enables testing
without real I/O operations. The RealFileSystem implementation
wraps standard library operations.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterator
from pathlib import Path


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path and shutil operations.
    Satisfies the FileSystem protocol structurally.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file."""
        return path.read_text(encoding="utf-8")

    def exists(self, path: Path) -> bool:
        """Check if a path exists (dangling symlinks count)."""
        return path.exists() or path.is_symlink()

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        return path.is_file()

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def iterdir(self, path: Path) -> Iterator[Path]:
        """Iterate over directory entries in name order."""
        return iter(sorted(path.iterdir()))

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        path.unlink()

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        shutil.rmtree(path)

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file's content and permissions, replacing dst."""
        shutil.copy2(src, dst)

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        shutil.copytree(src, dst)

    def rename(self, src: Path, dst: Path) -> None:
        """Move a path to a new location on the same filesystem."""
        src.rename(dst)
