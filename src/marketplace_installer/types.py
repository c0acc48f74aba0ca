"""Shared data types for marketplace installer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["InstallResult", "InstalledPlugin", "PluginSummary", "UninstallResult"]


@dataclass(frozen=True)
class PluginSummary:
    """Catalog line for one manifest plugin."""

    name: str
    description: str
    version: str
    agent_count: int
    skill_count: int


@dataclass
class InstallResult:
    """Result of an installation operation.

    Attributes:
        plugin: Plugin name.
        plugin_dir: Private directory holding the extracted archive.
        archive_url: URL the archive was downloaded from.
        agents: Base names of agent files copied into the agents directory.
        skills: Base names of skill directories copied into the skills directory.
    """

    plugin: str
    plugin_dir: Path
    archive_url: str
    agents: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.plugin:
            raise ValueError("plugin cannot be empty")


@dataclass
class UninstallResult:
    """Result of an uninstallation operation.

    Attributes:
        plugin: Plugin name.
        plugin_dir: Private directory that was deleted.
        removed_agents: Agent files removed from the agents directory.
        removed_skills: Skill directories removed from the skills directory.
    """

    plugin: str
    plugin_dir: Path
    removed_agents: list[str] = field(default_factory=list)
    removed_skills: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.plugin:
            raise ValueError("plugin cannot be empty")


@dataclass
class InstalledPlugin:
    """A plugin present under the plugins root."""

    name: str
    path: Path
    description: str = ""
    version: str = ""
    agents: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
