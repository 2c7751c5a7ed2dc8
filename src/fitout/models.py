"""Data models shared by the resolution engine and its collaborators."""

from __future__ import annotations

import typing as t

import pydantic

Scope = t.Literal["local", "user", "global"]


class PluginReference(pydantic.BaseModel):
    """A plugin id with an optional minimum version, parsed from one config line.

    Examples
    --------
    >>> PluginReference(id="git@pickled", constraint="1.2.0")
    PluginReference(id='git@pickled', constraint='1.2.0')
    """

    model_config = pydantic.ConfigDict(frozen=True)

    id: str
    constraint: str | None = None


class ParseFailure(pydantic.BaseModel):
    """A rejected configuration line and the reason it was rejected."""

    model_config = pydantic.ConfigDict(frozen=True)

    input: str
    message: str


class ProjectConfig(pydantic.BaseModel):
    """Plugin lines and profile names declared by a project.

    Examples
    --------
    >>> ProjectConfig()
    ProjectConfig(plugins=[], profiles=[])
    """

    plugins: list[str] = pydantic.Field(default_factory=list)
    profiles: list[str] = pydantic.Field(default_factory=list)


class ResolvedPlugin(pydantic.BaseModel):
    """A desired plugin with the layer credited for introducing it.

    ``source`` is ``"project"`` or the name of the profile that first
    listed the id.
    """

    id: str
    source: str
    constraint: str | None = None


class ConstraintOverride(pydantic.BaseModel):
    """The project's own minimum version lost the merge to another layer."""

    plugin_id: str
    project_constraint: str
    winning_constraint: str
    winning_source: str


class ResolutionResult(pydantic.BaseModel):
    """Desired plugin set with collected errors and override diagnostics."""

    plugins: list[ResolvedPlugin] = pydantic.Field(default_factory=list)
    errors: list[str] = pydantic.Field(default_factory=list)
    constraint_overrides: list[ConstraintOverride] = pydantic.Field(default_factory=list)


class InstalledPlugin(pydantic.BaseModel):
    """A plugin as reported by ``claude plugin list --json``.

    Examples
    --------
    >>> p = InstalledPlugin.model_validate(
    ...     {"id": "git@pickled", "version": "1.0.0", "scope": "local",
    ...      "enabled": True, "projectPath": "/work/app"}
    ... )
    >>> p.project_path
    '/work/app'
    """

    model_config = pydantic.ConfigDict(populate_by_name=True)

    id: str
    version: str | None = None
    scope: Scope
    enabled: bool = True
    project_path: str | None = pydantic.Field(default=None, alias="projectPath")


class PresentPlugin(InstalledPlugin):
    """An installed plugin that is also desired, keeping desired provenance."""

    source: str
    constraint: str | None = None


class AvailablePlugin(pydantic.BaseModel):
    """A plugin offered by a locally cloned marketplace."""

    id: str
    version: str | None = None
    marketplace: str


class PluginDiff(pydantic.BaseModel):
    """Desired-vs-installed classification for one project."""

    missing: list[ResolvedPlugin] = pydantic.Field(default_factory=list)
    present: list[PresentPlugin] = pydantic.Field(default_factory=list)
    extra: list[InstalledPlugin] = pydantic.Field(default_factory=list)


class OutdatedPlugin(pydantic.BaseModel):
    """An installed plugin whose marketplace offers a newer version."""

    id: str
    installed_version: str
    available_version: str
    scope: Scope = "local"
    project_path: str | None = None


class PluginInventory(t.Protocol):
    """Source of installed and available plugin snapshots."""

    def list_installed(self) -> list[InstalledPlugin]: ...

    def list_available(self) -> list[AvailablePlugin]: ...
