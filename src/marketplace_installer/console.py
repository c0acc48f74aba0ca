"""Rich console output for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from marketplace_installer.config import InstallerConfig
    from marketplace_installer.manifest import PluginEntry
    from marketplace_installer.types import (
        InstalledPlugin,
        InstallResult,
        PluginSummary,
        UninstallResult,
    )


class TUI:
    """Text output for marketplace-installer (non-interactive mode)."""

    def __init__(self) -> None:
        """Initialize TUI with stdout and stderr consoles."""
        self.console = Console()
        self.err_console = Console(stderr=True)

    def show_plugins(self, plugins: list[PluginSummary]) -> None:
        """Display the marketplace catalog.

        Args:
            plugins: Plugin summaries in display order.
        """
        if not plugins:
            self.console.print("[yellow]No plugins available[/yellow]")
            return

        self.console.print("[bold]Available plugins:[/bold]")
        self.console.print()
        for plugin in plugins:
            self.console.print(f"  [cyan]{escape(plugin.name)}[/cyan]")
            if plugin.description:
                self.console.print(f"    {escape(plugin.description)}")
            self.console.print(f"    version: {escape(plugin.version) or '-'}")
            self.console.print(f"    agents:  {plugin.agent_count}")
            self.console.print(f"    skills:  {plugin.skill_count}")
            self.console.print()

    def show_plugin(self, entry: PluginEntry, archive_url: str) -> None:
        """Display one manifest entry with its agents and skills."""
        self.console.print(f"[bold cyan]{escape(entry.name)}[/bold cyan] {escape(entry.version)}")
        if entry.description:
            self.console.print(f"  {escape(entry.description)}")
        self.console.print(f"  archive: {escape(archive_url)}")

        table = Table(show_header=True, header_style="bold")
        table.add_column("Type")
        table.add_column("Name", style="cyan")
        table.add_column("Path")
        for agent in entry.agents:
            table.add_row("agent", agent.basename, agent.file)
        for skill in entry.skills:
            table.add_row("skill", skill.basename, skill.dir)
        if entry.agents or entry.skills:
            self.console.print(table)

    def show_install_result(self, result: InstallResult) -> None:
        """Display what an install copied."""
        for agent in result.agents:
            self.console.print(f"  Installed agent: {escape(agent)}")
        for skill in result.skills:
            self.console.print(f"  Installed skill: {escape(skill)}")
        self.show_success(f"Plugin '{escape(result.plugin)}' installed successfully.")

    def show_uninstall_result(self, result: UninstallResult) -> None:
        """Display what an uninstall removed."""
        for agent in result.removed_agents:
            self.console.print(f"  Removed agent: {escape(agent)}")
        for skill in result.removed_skills:
            self.console.print(f"  Removed skill: {escape(skill)}")
        self.show_success(f"Plugin '{escape(result.plugin)}' uninstalled.")

    def show_installed(self, plugins: list[InstalledPlugin]) -> None:
        """Display installed plugins table.

        Args:
            plugins: Installed plugin records.
        """
        if not plugins:
            self.console.print("[yellow]No plugins installed[/yellow]")
            return

        table = Table(title="Installed Plugins")
        table.add_column("Name", style="cyan")
        table.add_column("Version")
        table.add_column("Agents")
        table.add_column("Skills")
        table.add_column("Path")

        for plugin in plugins:
            table.add_row(
                plugin.name,
                plugin.version or "-",
                ", ".join(plugin.agents) or "-",
                ", ".join(plugin.skills) or "-",
                str(plugin.path),
            )

        self.console.print(table)

    def show_config(self, config: InstallerConfig) -> None:
        """Display the resolved configuration."""
        self.console.print("\n[bold]Configuration[/bold]")
        self.console.print(f"  Manifest URL:     {escape(config.manifest_url)}")
        self.console.print(f"  Plugins root:     {config.plugins_root}")
        self.console.print(f"  Agents directory: {config.agents_dir}")
        self.console.print(f"  Skills directory: {config.skills_dir}")
        self.console.print(f"  Temp directory:   {config.temp_dir or 'system default'}")
        self.console.print(f"  Timeout:          {config.timeout:g}s")

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        """Show error message on stderr.

        Args:
            message: Error message.
        """
        self.err_console.print(f"[red]✗[/red] {message}")

    def show_info(self, message: str) -> None:
        """Show info message.

        Args:
            message: Info message.
        """
        self.console.print(f"[blue]i[/blue] {message}")
