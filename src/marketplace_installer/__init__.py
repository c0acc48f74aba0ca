"""Marketplace installer for agent and skill plugins."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from marketplace_installer.protocols import (
    FileSystem,
    ManifestSource,
    PluginInstaller,
    RemoteFetcher,
)

__all__ = [
    "__version__",
    "FileSystem",
    "ManifestSource",
    "PluginInstaller",
    "RemoteFetcher",
]
