"""Manifest lookup: fetching the catalog and resolving plugin names."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from marketplace_installer.config import InstallerConfig
from marketplace_installer.errors import NotFoundError
from marketplace_installer.fetch import HttpFetcher
from marketplace_installer.manifest import Manifest, PluginEntry
from marketplace_installer.protocols import RemoteFetcher
from marketplace_installer.types import PluginSummary

logger = logging.getLogger(__name__)


def list_plugins(manifest: Manifest) -> list[PluginSummary]:
    """Summarize every plugin in the manifest, sorted by name.

    Args:
        manifest: Parsed manifest.

    Returns:
        One PluginSummary per plugin.
    """
    return [
        PluginSummary(
            name=entry.name,
            description=entry.description,
            version=entry.version,
            agent_count=entry.agent_count,
            skill_count=entry.skill_count,
        )
        for entry in sorted(manifest.plugins.values(), key=lambda e: e.name)
    ]


def resolve_plugin(manifest: Manifest, name: str) -> PluginEntry:
    """Look up a plugin by name.

    Args:
        manifest: Parsed manifest.
        name: Plugin name.

    Returns:
        The matching PluginEntry.

    Raises:
        NotFoundError: If no plugin has that name. The error lists valid names.
    """
    entry = manifest.plugins.get(name)
    if entry is None:
        raise NotFoundError(name, manifest.names)
    return entry


class ManifestResolver:
    """Fetches the marketplace manifest and locates plugin archives."""

    def __init__(self, fetcher: RemoteFetcher, manifest_url: str) -> None:
        """Initialize resolver with required dependencies.

        Args:
            fetcher: Remote fetcher (required).
            manifest_url: URL of the manifest document.
        """
        self.fetcher = fetcher
        self.manifest_url = manifest_url

    @classmethod
    def create(
        cls, config: InstallerConfig, fetcher: RemoteFetcher | None = None
    ) -> ManifestResolver:
        """Factory method for production instantiation.

        Args:
            config: Installer configuration.
            fetcher: Optional fetcher (an HttpFetcher is created if not provided).

        Returns:
            Configured ManifestResolver.
        """
        return cls(
            fetcher=fetcher or HttpFetcher.create(timeout=config.timeout),
            manifest_url=config.manifest_url,
        )

    def fetch_manifest(self) -> Manifest:
        """Fetch and parse the manifest.

        Returns:
            Parsed Manifest.

        Raises:
            NetworkError: If the manifest cannot be fetched.
            ParseError: If the body is not a valid manifest.
        """
        raw = self.fetcher.fetch_bytes(self.manifest_url)
        manifest = Manifest.from_json(raw)
        logger.debug("Loaded %d plugins from %s", len(manifest.plugins), self.manifest_url)
        return manifest

    def archive_url(self, entry: PluginEntry) -> str:
        """Resolve an entry's archive location against the manifest URL.

        Relative locations are taken from the manifest's directory; absolute
        URLs are returned unchanged.
        """
        return urljoin(self.manifest_url, entry.archive_location)
