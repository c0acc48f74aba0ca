"""Validation utilities for marketplace-installer.

Path checks shared by manifest parsing, archive extraction and the
installer, plus frontmatter parsing for a plugin's PLUGIN.md.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath


class FrontmatterResult:
    """Result of parsing frontmatter from content."""

    __slots__ = ("data", "errors", "success")

    def __init__(self, data: str = "", errors: list[str] | None = None) -> None:
        """Initialize frontmatter result.

        Args:
            data: The parsed frontmatter content (raw YAML string).
            errors: List of parsing errors encountered.
        """
        self.data = data
        self.errors = errors or []
        self.success = len(self.errors) == 0


def parse_frontmatter(content: str) -> FrontmatterResult:
    """Parse YAML frontmatter from markdown content.

    Extracts the frontmatter block between the opening and closing '---'
    delimiters.

    Args:
        content: The full markdown content with optional frontmatter.

    Returns:
        FrontmatterResult with data (raw YAML string) and any errors.

    Example:
        >>> result = parse_frontmatter("---\\nname: test\\n---\\nBody")
        >>> result.success
        True
        >>> result.data
        'name: test'
    """
    if not content.startswith("---"):
        return FrontmatterResult(errors=["Content must have YAML frontmatter"])

    try:
        end_idx = content.index("---", 3)
        frontmatter = content[3:end_idx].strip()
        return FrontmatterResult(data=frontmatter)
    except ValueError:
        return FrontmatterResult(errors=["Invalid frontmatter: missing closing ---"])


def relative_path_error(value: str) -> str | None:
    """Check that a path stays inside whatever directory it is joined to.

    Backslashes count as separators so archives built on Windows are
    judged the same way as POSIX ones.

    Args:
        value: Relative path from a manifest or archive entry.

    Returns:
        Error message if the path is unsafe, None if it is acceptable.
    """
    if not value or not value.strip():
        return "path is empty"
    normalized = value.replace("\\", "/")
    if normalized.startswith("/") or PureWindowsPath(value).drive:
        return f"path '{value}' must be relative"
    if ".." in PurePosixPath(normalized).parts:
        return f"path '{value}' must not contain '..'"
    return None


def base_name(value: str) -> str:
    """Return the final component of a manifest path ('skills/bar/' -> 'bar')."""
    return PurePosixPath(value.replace("\\", "/")).name


def is_safe_name(name: str) -> bool:
    """Check that a plugin name is a single usable directory name.

    Dot-prefixed names are refused: they would be hidden, and the installer
    uses them for staging directories under the plugins root.
    """
    if not name or name.startswith("."):
        return False
    return "/" not in name and "\\" not in name and not PureWindowsPath(name).drive


def resolve_within(root: Path, relative: str) -> Path | None:
    """Resolve a relative path against root, refusing anything that escapes it.

    Args:
        root: Directory the result must stay inside.
        relative: Path relative to root.

    Returns:
        The resolved path, or None if it falls outside root.
    """
    if relative_path_error(relative):
        return None
    base = root.resolve()
    candidate = (base / relative.replace("\\", "/")).resolve()
    if candidate != base and not candidate.is_relative_to(base):
        return None
    return candidate
