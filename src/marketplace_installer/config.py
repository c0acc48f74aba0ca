"""Installer configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

REPO = "jbaranski/jeff-claude"
BRANCH = "main"
RAW_BASE = f"https://raw.githubusercontent.com/{REPO}/{BRANCH}"
MANIFEST_URL = f"{RAW_BASE}/marketplace.json"

# Project-relative directory the host tool scans for agents and skills
DEFAULT_ROOT_NAME = ".claude"

# Seconds before a manifest or archive request is abandoned
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class InstallerConfig:
    """Locations used by every marketplace operation.

    Attributes:
        manifest_url: URL of the marketplace manifest.
        plugins_root: Directory holding one private directory per plugin.
        agents_dir: Flat discovery directory for agent files.
        skills_dir: Flat discovery directory for skill directories.
        temp_dir: Directory for downloaded archives (None uses the system default).
        timeout: Network timeout in seconds.
    """

    manifest_url: str
    plugins_root: Path
    agents_dir: Path
    skills_dir: Path
    temp_dir: Path | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def create(
        cls,
        root: Path,
        manifest_url: str | None = None,
        temp_dir: Path | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> InstallerConfig:
        """Create a configuration with all directories under one root.

        Args:
            root: Discovery root (the directory holding plugins/, agents/, skills/).
            manifest_url: Override manifest URL.
            temp_dir: Override directory for temporary downloads.
            timeout: Network timeout in seconds.

        Returns:
            Configured InstallerConfig.
        """
        return cls(
            manifest_url=manifest_url or MANIFEST_URL,
            plugins_root=root / "plugins",
            agents_dir=root / "agents",
            skills_dir=root / "skills",
            temp_dir=temp_dir,
            timeout=timeout,
        )

    @classmethod
    def create_default(cls) -> InstallerConfig:
        """Create a configuration rooted at ./.claude in the working directory."""
        return cls.create(Path.cwd() / DEFAULT_ROOT_NAME)

    @property
    def root(self) -> Path:
        """The common parent of the plugin and discovery directories."""
        return self.plugins_root.parent
