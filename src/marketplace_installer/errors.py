"""Error types raised by marketplace operations.

Every failure surfaced to the CLI derives from MarketplaceError so commands
can report it and exit non-zero with a single except clause.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "ArchiveError",
    "FilesystemError",
    "MarketplaceError",
    "NetworkError",
    "NotFoundError",
    "NotInstalledError",
    "ParseError",
    "UnsafeArchiveError",
]

MANIFEST_SHAPE_HINT = (
    'expected {"plugins": {"<name>": {"description": str, "version": str, '
    '"zip": str, "agents": [{"file": str}], "skills": [{"dir": str}]}}}'
)


class MarketplaceError(Exception):
    """Base class for marketplace installer errors."""

    pass


class NetworkError(MarketplaceError):
    """A manifest or archive fetch failed."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(MarketplaceError):
    """The manifest document does not match the expected schema."""

    def __init__(self, message: str, hint: str = MANIFEST_SHAPE_HINT) -> None:
        self.hint = hint
        super().__init__(f"{message} ({hint})" if hint else message)


class NotFoundError(MarketplaceError):
    """A plugin name is absent from the manifest."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        lines = [f"Plugin '{name}' not found.", "", "Available plugins:"]
        lines.extend(f"  {plugin}" for plugin in available)
        super().__init__("\n".join(lines))


class NotInstalledError(MarketplaceError):
    """Uninstall was requested for a plugin with no private directory."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Plugin '{name}' is not installed.")


class ArchiveError(MarketplaceError):
    """A downloaded plugin archive could not be read."""

    pass


class UnsafeArchiveError(ArchiveError):
    """An archive entry would be written outside its extraction directory."""

    def __init__(self, member: str, destination: Path) -> None:
        self.member = member
        self.destination = destination
        super().__init__(
            f"Refusing to extract '{member}': path escapes {destination}"
        )


class FilesystemError(MarketplaceError):
    """A copy or remove failed on the local filesystem."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
