"""Tests for resolver module."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import ALPHA_URL, MANIFEST_URL, FakeFetcher

from marketplace_installer.config import InstallerConfig
from marketplace_installer.errors import NetworkError, NotFoundError, ParseError
from marketplace_installer.fetch import HttpFetcher
from marketplace_installer.manifest import Manifest, PluginEntry
from marketplace_installer.resolver import ManifestResolver, list_plugins, resolve_plugin
from marketplace_installer.types import PluginSummary


class TestListPlugins:
    """Tests for list_plugins."""

    def test_sorted_by_name(self, manifest: Manifest) -> None:
        """Plugins are listed alphabetically, not in declaration order."""
        assert [p.name for p in list_plugins(manifest)] == ["alpha", "beta"]

    def test_counts(self, manifest: Manifest) -> None:
        """Summaries carry metadata and agent/skill counts."""
        alpha = list_plugins(manifest)[0]
        assert alpha == PluginSummary(
            name="alpha",
            description="Alpha review tools",
            version="1.0.0",
            agent_count=1,
            skill_count=2,
        )

    def test_empty_manifest(self) -> None:
        """An empty catalog lists nothing."""
        assert list_plugins(Manifest(plugins={})) == []


class TestResolvePlugin:
    """Tests for resolve_plugin."""

    def test_found(self, manifest: Manifest) -> None:
        entry = resolve_plugin(manifest, "beta")
        assert entry.name == "beta"
        assert entry.agent_count == 2

    def test_not_found_lists_available(self, manifest: Manifest) -> None:
        """The error enumerates every valid plugin name."""
        with pytest.raises(NotFoundError) as exc_info:
            resolve_plugin(manifest, "does-not-exist")

        error = exc_info.value
        assert error.name == "does-not-exist"
        assert error.available == ["alpha", "beta"]
        message = str(error)
        assert "Plugin 'does-not-exist' not found." in message
        assert "  alpha" in message
        assert "  beta" in message


class TestManifestResolver:
    """Tests for ManifestResolver."""

    def test_create_uses_config(self, tmp_path: Path) -> None:
        """Factory wires the configured URL and an HttpFetcher."""
        config = InstallerConfig.create(tmp_path, manifest_url=MANIFEST_URL, timeout=5)
        resolver = ManifestResolver.create(config)
        assert resolver.manifest_url == MANIFEST_URL
        assert isinstance(resolver.fetcher, HttpFetcher)
        assert resolver.fetcher.timeout == 5

    def test_fetch_manifest(self, resolver: ManifestResolver, fetcher: FakeFetcher) -> None:
        """The manifest is fetched from the configured URL and parsed."""
        manifest = resolver.fetch_manifest()
        assert fetcher.requested == [MANIFEST_URL]
        assert set(manifest.plugins) == {"alpha", "beta"}

    def test_fetch_manifest_network_error(self) -> None:
        """Transport failures propagate as NetworkError with the URL."""
        resolver = ManifestResolver(fetcher=FakeFetcher(), manifest_url=MANIFEST_URL)
        with pytest.raises(NetworkError) as exc_info:
            resolver.fetch_manifest()
        assert exc_info.value.url == MANIFEST_URL

    def test_fetch_manifest_parse_error(self) -> None:
        """A body that is not a manifest raises ParseError."""
        fetcher = FakeFetcher({MANIFEST_URL: b"404: Not Found"})
        resolver = ManifestResolver(fetcher=fetcher, manifest_url=MANIFEST_URL)
        with pytest.raises(ParseError):
            resolver.fetch_manifest()

    def test_archive_url_relative(self, resolver: ManifestResolver, manifest: Manifest) -> None:
        """Relative archive locations resolve next to the manifest."""
        assert resolver.archive_url(manifest.plugins["alpha"]) == ALPHA_URL

    def test_archive_url_dot_relative(self, resolver: ManifestResolver) -> None:
        entry = PluginEntry(name="a", archive_location="./plugins/alpha.zip")
        assert resolver.archive_url(entry) == ALPHA_URL

    def test_archive_url_absolute(self, resolver: ManifestResolver) -> None:
        """Absolute archive URLs pass through unchanged."""
        entry = PluginEntry(name="a", archive_location="https://cdn.example/a.zip")
        assert resolver.archive_url(entry) == "https://cdn.example/a.zip"
