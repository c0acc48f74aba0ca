"""Shared test fixtures."""

from __future__ import annotations

import copy
import io
import json
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from marketplace_installer.config import InstallerConfig
from marketplace_installer.context import AppContext
from marketplace_installer.errors import NetworkError
from marketplace_installer.install import Installer
from marketplace_installer.manifest import Manifest
from marketplace_installer.resolver import ManifestResolver

MANIFEST_URL = "https://marketplace.example/jeff/main/marketplace.json"
ALPHA_URL = "https://marketplace.example/jeff/main/plugins/alpha.zip"
BETA_URL = "https://marketplace.example/jeff/main/plugins/beta.zip"

ALPHA_FILES = {
    "PLUGIN.md": "---\nname: alpha\ndescription: Alpha review tools\nversion: 1.0.0\n---\n# Alpha\n",
    "agents/alpha-reviewer.md": "---\nname: alpha-reviewer\n---\nReview the diff.\n",
    "skills/alpha-lint/SKILL.md": "---\nname: alpha-lint\n---\nRun the linter.\n",
    "skills/alpha-lint/scripts/run.sh": "#!/bin/sh\necho lint\n",
    "skills/shared/SKILL.md": "alpha flavour\n",
}

BETA_FILES = {
    "PLUGIN.md": "---\nname: beta\ndescription: Beta writing tools\nversion: 0.2.0\n---\n# Beta\n",
    "agents/beta-writer.md": "---\nname: beta-writer\n---\nWrite docs.\n",
    "agents/beta-editor.md": "---\nname: beta-editor\n---\nEdit docs.\n",
    "skills/shared/SKILL.md": "beta flavour\n",
}

MANIFEST_DATA: dict[str, Any] = {
    "plugins": {
        "beta": {
            "description": "Beta writing tools",
            "version": "0.2.0",
            "zip": "plugins/beta.zip",
            "agents": [{"file": "agents/beta-writer.md"}, {"file": "agents/beta-editor.md"}],
            "skills": [{"dir": "skills/shared"}],
        },
        "alpha": {
            "description": "Alpha review tools",
            "version": "1.0.0",
            "zip": "plugins/alpha.zip",
            "agents": [{"file": "agents/alpha-reviewer.md"}],
            "skills": [{"dir": "skills/alpha-lint"}, {"dir": "skills/shared"}],
        },
    }
}


def zip_bytes(files: dict[str, str], modes: dict[str, int] | None = None) -> bytes:
    """Build an in-memory zip archive from a name -> content mapping.

    modes maps member names to Unix permission bits recorded in the archive.
    """
    modes = modes or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            if name in modes:
                info = zipfile.ZipInfo(name)
                info.create_system = 3
                info.external_attr = (0o100000 | modes[name]) << 16
                archive.writestr(info, content)
            else:
                archive.writestr(name, content)
    return buffer.getvalue()


def make_zip(path: Path, files: dict[str, str]) -> Path:
    """Write a zip archive to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(zip_bytes(files))
    return path


def snapshot(directory: Path) -> dict[str, bytes]:
    """Map every file under directory to its content, keyed by relative path."""
    if not directory.exists():
        return {}
    return {
        str(path.relative_to(directory)): path.read_bytes()
        for path in sorted(directory.rglob("*"))
        if path.is_file()
    }


class FakeFetcher:
    """In-memory RemoteFetcher serving canned responses."""

    def __init__(self, responses: dict[str, bytes] | None = None) -> None:
        self.responses = dict(responses or {})
        self.requested: list[str] = []

    def fetch_bytes(self, url: str) -> bytes:
        self.requested.append(url)
        if url not in self.responses:
            raise NetworkError(url, "HTTP 404 Not Found")
        return self.responses[url]

    def download(self, url: str, dest: Path) -> Path:
        dest.write_bytes(self.fetch_bytes(url))
        return dest


# ============================================================================
# Marketplace Fixtures
# ============================================================================


@pytest.fixture
def manifest_data() -> dict[str, Any]:
    """A fresh copy of the fixture manifest document."""
    return copy.deepcopy(MANIFEST_DATA)


@pytest.fixture
def fetcher(manifest_data: dict[str, Any]) -> FakeFetcher:
    """Fetcher serving the fixture manifest and both plugin archives."""
    return FakeFetcher(
        {
            MANIFEST_URL: json.dumps(manifest_data).encode(),
            ALPHA_URL: zip_bytes(ALPHA_FILES),
            BETA_URL: zip_bytes(BETA_FILES),
        }
    )


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Discovery root inside a temporary project."""
    return tmp_path / "project" / ".claude"


@pytest.fixture
def config(tmp_path: Path, project_root: Path) -> InstallerConfig:
    """Installer configuration rooted in a temporary project."""
    return InstallerConfig.create(
        project_root, manifest_url=MANIFEST_URL, temp_dir=tmp_path / "tmp"
    )


@pytest.fixture
def resolver(config: InstallerConfig, fetcher: FakeFetcher) -> ManifestResolver:
    """Resolver reading the fixture manifest."""
    return ManifestResolver(fetcher=fetcher, manifest_url=config.manifest_url)


@pytest.fixture
def manifest(resolver: ManifestResolver) -> Manifest:
    """The parsed fixture manifest."""
    return resolver.fetch_manifest()


@pytest.fixture
def installer(
    config: InstallerConfig, resolver: ManifestResolver, fetcher: FakeFetcher
) -> Installer:
    """Installer wired to the fake fetcher and a real filesystem."""
    return Installer.create(config, resolver=resolver, fetcher=fetcher)


@pytest.fixture
def app_context(
    config: InstallerConfig, resolver: ManifestResolver, installer: Installer
) -> AppContext:
    """AppContext backed by the fixture marketplace."""
    return AppContext(config=config, resolver=resolver, installer=installer)


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    fs.is_dir.return_value = False
    fs.is_file.return_value = False
    fs.iterdir.return_value = iter([])
    fs.read_text.return_value = ""
    return fs


@pytest.fixture
def mock_app_context(config: InstallerConfig) -> MagicMock:
    """Create a complete mock AppContext for CLI testing."""
    ctx = MagicMock(spec=AppContext)
    ctx.config = config
    ctx.resolver = MagicMock()
    ctx.installer = MagicMock()
    ctx.filesystem = MagicMock()
    return ctx
