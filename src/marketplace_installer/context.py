"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so test doubles can be injected without
inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from marketplace_installer.config import DEFAULT_ROOT_NAME, DEFAULT_TIMEOUT, InstallerConfig
from marketplace_installer.protocols import FileSystem, ManifestSource, PluginInstaller


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from marketplace_installer.filesystem import RealFileSystem
    return RealFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    """

    config: InstallerConfig
    resolver: ManifestSource
    installer: PluginInstaller
    filesystem: FileSystem = field(default_factory=_default_filesystem)


def create_context(
    root: Path | None = None,
    manifest_url: str | None = None,
    temp_dir: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.
    For tests, construct AppContext directly with test doubles.

    Args:
        root: Discovery root. Defaults to ./.claude in the working directory.
        manifest_url: Override manifest URL.
        temp_dir: Override directory for temporary downloads.
        timeout: Network timeout in seconds.

    Returns:
        Configured AppContext with all dependencies.
    """
    from marketplace_installer.fetch import HttpFetcher
    from marketplace_installer.filesystem import RealFileSystem
    from marketplace_installer.install import Installer
    from marketplace_installer.resolver import ManifestResolver

    config = InstallerConfig.create(
        root or Path.cwd() / DEFAULT_ROOT_NAME,
        manifest_url=manifest_url,
        temp_dir=temp_dir,
        timeout=timeout,
    )
    fetcher = HttpFetcher.create(timeout=config.timeout)
    filesystem = RealFileSystem()
    resolver = ManifestResolver.create(config, fetcher)
    installer = Installer.create(
        config, resolver=resolver, fetcher=fetcher, filesystem=filesystem
    )

    return AppContext(
        config=config,
        resolver=resolver,
        installer=installer,
        filesystem=filesystem,
    )
