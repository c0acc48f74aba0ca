"""Marketplace manifest models."""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, model_validator

from marketplace_installer.errors import ParseError
from marketplace_installer.validation import base_name, is_safe_name, relative_path_error


def _check_entry_path(value: str) -> str:
    error = relative_path_error(value)
    if error:
        raise ValueError(error)
    if not base_name(value):
        raise ValueError(f"path '{value}' has no base name")
    return value


EntryPath = Annotated[str, AfterValidator(_check_entry_path)]


class AgentEntry(BaseModel):
    """An agent definition file inside a plugin archive."""

    file: EntryPath

    @property
    def basename(self) -> str:
        """Name the file gets in the agents discovery directory."""
        return base_name(self.file)


class SkillEntry(BaseModel):
    """A skill directory inside a plugin archive."""

    dir: EntryPath

    @property
    def basename(self) -> str:
        """Name the directory gets in the skills discovery directory."""
        return base_name(self.dir)


class PluginEntry(BaseModel):
    """A plugin within the marketplace manifest.

    The name is not part of the JSON entry; it is the entry's key in the
    manifest's ``plugins`` mapping and is filled in by Manifest.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    version: str = ""
    archive_location: str = Field(alias="zip", min_length=1)
    agents: list[AgentEntry] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)

    @property
    def agent_count(self) -> int:
        return len(self.agents)

    @property
    def skill_count(self) -> int:
        return len(self.skills)


class Manifest(BaseModel):
    """Marketplace manifest (marketplace.json)."""

    plugins: dict[str, PluginEntry]

    @model_validator(mode="after")
    def _assign_names(self) -> Manifest:
        for key, entry in self.plugins.items():
            if not is_safe_name(key):
                raise ValueError(f"plugin name '{key}' is not a valid directory name")
            entry.name = key
        return self

    @property
    def names(self) -> list[str]:
        """Plugin names in sorted order."""
        return sorted(self.plugins)

    @classmethod
    def from_json(cls, raw: str | bytes) -> Manifest:
        """Parse a manifest document.

        Args:
            raw: JSON text or bytes.

        Returns:
            Parsed Manifest.

        Raises:
            ParseError: If the document is not JSON or does not match the schema.
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Manifest is not valid JSON: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in e.errors()
            )
            raise ParseError(f"Manifest does not match the expected schema: {problems}") from e
