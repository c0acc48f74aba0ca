"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the core services.
Designing to interfaces enables:
- Loose coupling between components
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from marketplace_installer.types import InstalledPlugin, InstallResult, UninstallResult

if TYPE_CHECKING:
    from marketplace_installer.manifest import Manifest, PluginEntry


@runtime_checkable
class RemoteFetcher(Protocol):
    """Protocol for retrieving remote documents."""

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch the body of a URL.

        Raises:
            NetworkError: If the fetch fails.
        """
        ...

    def download(self, url: str, dest: Path) -> Path:
        """Download a URL into a local file.

        Raises:
            NetworkError: If the fetch fails.
            FilesystemError: If the destination cannot be written.
        """
        ...


@runtime_checkable
class ManifestSource(Protocol):
    """Protocol for manifest lookup.

    Implementations fetch the marketplace manifest and locate plugin archives.
    """

    manifest_url: str

    def fetch_manifest(self) -> Manifest:
        """Fetch and parse the manifest.

        Raises:
            NetworkError: If the manifest cannot be fetched.
            ParseError: If the manifest is malformed.
        """
        ...

    def archive_url(self, entry: PluginEntry) -> str:
        """Resolve a plugin's archive location to an absolute URL."""
        ...


@runtime_checkable
class PluginInstaller(Protocol):
    """Protocol for plugin install/uninstall operations."""

    def install_plugin(self, entry: PluginEntry) -> InstallResult:
        """Download, extract and materialize a plugin."""
        ...

    def uninstall_plugin(self, name: str) -> UninstallResult:
        """Remove a plugin's discovery artifacts and private directory."""
        ...

    def list_installed(self) -> list[InstalledPlugin]:
        """List plugins present under the plugins root."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Enables testing without real I/O by allowing mock implementations.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        ...

    def iterdir(self, path: Path) -> Iterator[Path]:
        """Iterate over the entries of a directory."""
        ...

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        ...

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a single file, overwriting the destination."""
        ...

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        ...

    def rename(self, src: Path, dst: Path) -> None:
        """Move a path to a new location on the same filesystem."""
        ...
