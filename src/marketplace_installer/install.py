"""Installation operations for marketplace plugins."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml

from marketplace_installer.archive import extract_archive
from marketplace_installer.config import InstallerConfig
from marketplace_installer.errors import (
    FilesystemError,
    NotInstalledError,
    ParseError,
    UnsafeArchiveError,
)
from marketplace_installer.fetch import HttpFetcher
from marketplace_installer.filesystem import RealFileSystem
from marketplace_installer.manifest import AgentEntry, PluginEntry, SkillEntry
from marketplace_installer.protocols import FileSystem, ManifestSource, RemoteFetcher
from marketplace_installer.resolver import ManifestResolver
from marketplace_installer.types import InstalledPlugin, InstallResult, UninstallResult
from marketplace_installer.validation import is_safe_name, parse_frontmatter, resolve_within

logger = logging.getLogger(__name__)

# Layout inside a plugin's private directory
AGENTS_SUBDIR = "agents"
SKILLS_SUBDIR = "skills"
AGENT_SUFFIX = ".md"
METADATA_FILE = "PLUGIN.md"


@contextmanager
def _filesystem_errors(path: Path) -> Iterator[None]:
    """Re-raise OSError as FilesystemError naming path."""
    try:
        yield
    except OSError as e:
        raise FilesystemError(Path(e.filename) if e.filename else path, e.strerror or str(e)) from e


class Installer:
    """Handles installation of marketplace plugins.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        config: InstallerConfig,
        resolver: ManifestSource,
        fetcher: RemoteFetcher,
        filesystem: FileSystem,
    ) -> None:
        """Initialize installer with required dependencies.

        Args:
            config: Installer configuration (required).
            resolver: Manifest resolver used to locate archives (required).
            fetcher: Remote fetcher used to download archives (required).
            filesystem: Filesystem abstraction (required).

        Note:
            Use factory method `create()` for production code.
            Direct construction is for testing with explicit dependencies.
        """
        self.config = config
        self.resolver = resolver
        self.fetcher = fetcher
        self.fs = filesystem

    @classmethod
    def create(
        cls,
        config: InstallerConfig,
        resolver: ManifestSource | None = None,
        fetcher: RemoteFetcher | None = None,
        filesystem: FileSystem | None = None,
    ) -> Installer:
        """Factory method for production instantiation.

        Args:
            config: Installer configuration.
            resolver: Optional resolver (created from config if not provided).
            fetcher: Optional fetcher (created if not provided).
            filesystem: Optional filesystem abstraction (created if not provided).

        Returns:
            Configured Installer instance.
        """
        fetcher = fetcher or HttpFetcher.create(timeout=config.timeout)
        return cls(
            config=config,
            resolver=resolver or ManifestResolver.create(config, fetcher),
            fetcher=fetcher,
            filesystem=filesystem or RealFileSystem(),
        )

    def plugin_dir(self, name: str) -> Path:
        """Get the private directory for a plugin."""
        return self.config.plugins_root / name

    def is_installed(self, name: str) -> bool:
        """Check whether a plugin has a private directory."""
        return is_safe_name(name) and self.fs.is_dir(self.plugin_dir(name))

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install_plugin(self, entry: PluginEntry) -> InstallResult:
        """Install a plugin from its manifest entry.

        Downloads the archive to a unique temporary file, extracts it into
        the plugin's private directory (replacing any previous install),
        then copies each declared agent and skill into the discovery
        directories. Agents and skills are flattened by base name, so a
        later install of another plugin with the same names overwrites them.

        Args:
            entry: Resolved manifest entry.

        Returns:
            InstallResult with the copied agent and skill names.

        Raises:
            NetworkError: If the archive cannot be downloaded.
            ArchiveError: If the archive is unreadable.
            UnsafeArchiveError: If an archive entry escapes the private directory.
            FilesystemError: If a declared path is missing or a copy fails.
        """
        if not is_safe_name(entry.name):
            raise ParseError(f"Invalid plugin name '{entry.name}'", hint="")

        archive_url = self.resolver.archive_url(entry)
        plugin_dir = self.plugin_dir(entry.name)
        self._ensure_dirs()

        archive_path = self._temp_archive_path(entry.name)
        try:
            logger.debug("Downloading %s to %s", archive_url, archive_path)
            self.fetcher.download(archive_url, archive_path)
            self._extract_to_plugin_dir(archive_path, plugin_dir)
        finally:
            self._discard(archive_path)

        agents = [self._install_agent(plugin_dir, agent) for agent in entry.agents]
        skills = [self._install_skill(plugin_dir, skill) for skill in entry.skills]

        return InstallResult(
            plugin=entry.name,
            plugin_dir=plugin_dir,
            archive_url=archive_url,
            agents=agents,
            skills=skills,
        )

    def _ensure_dirs(self) -> None:
        """Create the plugins root and discovery directories."""
        for directory in (self.config.plugins_root, self.config.agents_dir, self.config.skills_dir):
            with _filesystem_errors(directory):
                self.fs.mkdir(directory, parents=True, exist_ok=True)

    def _temp_archive_path(self, name: str) -> Path:
        """Reserve a unique temporary file for a downloaded archive."""
        temp_dir = self.config.temp_dir
        with _filesystem_errors(temp_dir or Path(tempfile.gettempdir())):
            if temp_dir is not None:
                self.fs.mkdir(temp_dir, parents=True, exist_ok=True)
            fd, path = tempfile.mkstemp(prefix=f"{name}-", suffix=".zip", dir=temp_dir)
            os.close(fd)
        return Path(path)

    def _discard(self, path: Path) -> None:
        """Remove a temporary file if it still exists.

        Runs in a finally block, so a failure is logged rather than raised
        over the error that ended the install.
        """
        try:
            if self.fs.exists(path):
                self.fs.unlink(path)
        except OSError as e:
            logger.warning("Could not remove temporary archive %s: %s", path, e)

    def _extract_to_plugin_dir(self, archive_path: Path, plugin_dir: Path) -> None:
        """Extract into a staging directory, then swap it in for plugin_dir.

        The previous install is only removed once extraction has succeeded.
        """
        with _filesystem_errors(self.config.plugins_root):
            staging = Path(
                tempfile.mkdtemp(prefix=f".{plugin_dir.name}-", dir=self.config.plugins_root)
            )
        try:
            extract_archive(archive_path, staging)
            with _filesystem_errors(plugin_dir):
                self._remove(plugin_dir)
                self.fs.rename(staging, plugin_dir)
            logger.debug("Extracted %s to %s", archive_path.name, plugin_dir)
        finally:
            try:
                if self.fs.exists(staging):
                    self.fs.rmtree(staging)
            except OSError as e:
                logger.warning("Could not remove staging directory %s: %s", staging, e)

    def _source_path(self, plugin_dir: Path, relative: str) -> Path:
        source = resolve_within(plugin_dir, relative)
        if source is None:
            raise UnsafeArchiveError(relative, plugin_dir)
        return source

    def _install_agent(self, plugin_dir: Path, agent: AgentEntry) -> str:
        """Copy one agent file into the agents directory, overwriting.

        Returns:
            The agent's base name.
        """
        source = self._source_path(plugin_dir, agent.file)
        if not self.fs.is_file(source):
            raise FilesystemError(source, "agent file declared in manifest is missing from archive")

        dest = self.config.agents_dir / agent.basename
        with _filesystem_errors(dest):
            if self.fs.is_dir(dest):
                self.fs.rmtree(dest)
            self.fs.copy_file(source, dest)
        logger.debug("Installed agent %s", agent.basename)
        return agent.basename

    def _install_skill(self, plugin_dir: Path, skill: SkillEntry) -> str:
        """Replace a skill directory in the skills directory.

        Returns:
            The skill's base name.
        """
        source = self._source_path(plugin_dir, skill.dir)
        if not self.fs.is_dir(source):
            raise FilesystemError(
                source, "skill directory declared in manifest is missing from archive"
            )

        dest = self.config.skills_dir / skill.basename
        with _filesystem_errors(dest):
            # Remove existing if present; skills are replaced, never merged
            self._remove(dest)
            self.fs.copytree(source, dest)
        logger.debug("Installed skill %s", skill.basename)
        return skill.basename

    def _remove(self, path: Path) -> bool:
        """Remove a file or directory tree if present.

        Returns:
            True if something was removed.
        """
        if not self.fs.exists(path):
            return False
        if self.fs.is_dir(path):
            self.fs.rmtree(path)
        else:
            self.fs.unlink(path)
        return True

    # ------------------------------------------------------------------
    # Uninstall
    # ------------------------------------------------------------------

    def uninstall_plugin(self, name: str) -> UninstallResult:
        """Uninstall a plugin.

        The artifacts to remove are read from the plugin's own private
        directory, not from the manifest: every agents/*.md file and every
        skills/*/ directory found there has its same-named counterpart
        removed from the discovery directories. Missing counterparts are
        skipped.

        Args:
            name: Plugin name.

        Returns:
            UninstallResult listing what was removed.

        Raises:
            NotInstalledError: If the plugin has no private directory.
            FilesystemError: If a removal fails.
        """
        if not self.is_installed(name):
            raise NotInstalledError(name)

        plugin_dir = self.plugin_dir(name)
        removed_agents = []
        for agent in self._plugin_agents(plugin_dir):
            target = self.config.agents_dir / agent
            with _filesystem_errors(target):
                if self._remove(target):
                    removed_agents.append(agent)
                    logger.debug("Removed agent %s", agent)

        removed_skills = []
        for skill in self._plugin_skills(plugin_dir):
            target = self.config.skills_dir / skill
            with _filesystem_errors(target):
                if self._remove(target):
                    removed_skills.append(skill)
                    logger.debug("Removed skill %s", skill)

        with _filesystem_errors(plugin_dir):
            self.fs.rmtree(plugin_dir)

        return UninstallResult(
            plugin=name,
            plugin_dir=plugin_dir,
            removed_agents=removed_agents,
            removed_skills=removed_skills,
        )

    def _plugin_agents(self, plugin_dir: Path) -> list[str]:
        """Agent file names present in a plugin's private agents directory."""
        agents_dir = plugin_dir / AGENTS_SUBDIR
        if not self.fs.is_dir(agents_dir):
            return []
        return [
            path.name
            for path in self.fs.iterdir(agents_dir)
            if path.suffix == AGENT_SUFFIX and self.fs.is_file(path)
        ]

    def _plugin_skills(self, plugin_dir: Path) -> list[str]:
        """Skill directory names present in a plugin's private skills directory."""
        skills_dir = plugin_dir / SKILLS_SUBDIR
        if not self.fs.is_dir(skills_dir):
            return []
        return [path.name for path in self.fs.iterdir(skills_dir) if self.fs.is_dir(path)]

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def list_installed(self) -> list[InstalledPlugin]:
        """List plugins present under the plugins root.

        Staging directories left behind by an interrupted install (dot
        prefixed) are skipped.

        Returns:
            InstalledPlugin records sorted by name.
        """
        root = self.config.plugins_root
        if not self.fs.is_dir(root):
            return []

        plugins = []
        for path in self.fs.iterdir(root):
            if path.name.startswith(".") or not self.fs.is_dir(path):
                continue
            metadata = self._read_metadata(path)
            plugins.append(
                InstalledPlugin(
                    name=path.name,
                    path=path,
                    description=str(metadata.get("description", "")),
                    version=str(metadata.get("version", "")),
                    agents=self._plugin_agents(path),
                    skills=self._plugin_skills(path),
                )
            )
        return plugins

    def _read_metadata(self, plugin_dir: Path) -> dict[str, Any]:
        """Read the YAML frontmatter of a plugin's PLUGIN.md, if any."""
        metadata_file = plugin_dir / METADATA_FILE
        if not self.fs.is_file(metadata_file):
            return {}

        with _filesystem_errors(metadata_file):
            content = self.fs.read_text(metadata_file)
        result = parse_frontmatter(content)
        if not result.success:
            return {}

        try:
            data = yaml.safe_load(result.data)
        except yaml.YAMLError as e:
            logger.warning("Ignoring malformed frontmatter in %s: %s", metadata_file, e)
            return {}
        return data if isinstance(data, dict) else {}
