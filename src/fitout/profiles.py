"""Profile loading and layered resolution of the desired plugin set.

Layers are processed in a fixed order: the implicit ``default`` profile,
then the project's explicit profiles in listed order, then the project's
own plugin lines. The first layer to mention an id is credited as its
source; constraints from every layer are merged and the highest wins.
"""

from __future__ import annotations

import logging
import typing as t
from pathlib import Path

from .config import load_plugin_lines
from .constraint import merge_constraints, parse_plugin_list
from .exceptions import ConfigFileError
from .models import ConstraintOverride, ProjectConfig, ResolutionResult, ResolvedPlugin
from .versions import compare_versions

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
PROJECT_SOURCE = "project"


class ProfileStore(t.Protocol):
    """Looks up a profile's raw plugin lines by name."""

    def load(self, name: str) -> list[str] | None:
        """Return the profile's plugin lines, or None if it does not exist."""
        ...


class DirectoryProfileStore:
    """Profiles stored as ``<profiles_dir>/<name>.toml`` with a ``plugins`` array."""

    def __init__(self, profiles_dir: Path):
        self.profiles_dir = profiles_dir

    def path_for(self, name: str) -> Path:
        return self.profiles_dir / f"{name}.toml"

    def load(self, name: str) -> list[str] | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        return load_plugin_lines(path)

    def names(self) -> list[str]:
        """List available profile names, sorted."""
        if not self.profiles_dir.is_dir():
            return []
        return sorted(p.stem for p in self.profiles_dir.glob("*.toml"))


class _Resolver:
    """Accumulates one resolution pass."""

    def __init__(self) -> None:
        self.plugins: dict[str, ResolvedPlugin] = {}
        self.errors: list[str] = []
        self.project_constraints: dict[str, str] = {}
        self.overrides: dict[str, ConstraintOverride] = {}

    def add_profile(self, store: ProfileStore, name: str, *, required: bool) -> None:
        try:
            lines = store.load(name)
        except ConfigFileError as exc:
            self.errors.append(f'Invalid profile "{name}": {exc}')
            return
        if lines is None:
            if required:
                self.errors.append(f"Profile not found: {name}")
            return
        self.add_lines(lines, name)

    def add_lines(self, lines: t.Iterable[str], source: str) -> None:
        references, failures = parse_plugin_list(lines)
        self.errors.extend(f"{failure.input}: {failure.message}" for failure in failures)

        for ref in references:
            existing = self.plugins.get(ref.id)
            if existing is None:
                self.plugins[ref.id] = ResolvedPlugin(
                    id=ref.id, source=source, constraint=ref.constraint
                )
            else:
                existing.constraint = merge_constraints(existing.constraint, ref.constraint)

            if source == PROJECT_SOURCE and ref.constraint is not None:
                own = t.cast(
                    "str", merge_constraints(self.project_constraints.get(ref.id), ref.constraint)
                )
                self.project_constraints[ref.id] = own
                self._track_override(self.plugins[ref.id], own)

    def _track_override(self, entry: ResolvedPlugin, own: str) -> None:
        if entry.source == PROJECT_SOURCE or entry.constraint is None:
            return
        if compare_versions(entry.constraint, own) == 0:
            _ = self.overrides.pop(entry.id, None)
            return
        self.overrides[entry.id] = ConstraintOverride(
            plugin_id=entry.id,
            project_constraint=own,
            winning_constraint=entry.constraint,
            winning_source=entry.source,
        )

    def result(self) -> ResolutionResult:
        return ResolutionResult(
            plugins=list(self.plugins.values()),
            errors=self.errors,
            constraint_overrides=list(self.overrides.values()),
        )


def resolve_profiles(store: ProfileStore, config: ProjectConfig) -> ResolutionResult:
    """Resolve the desired plugin set for a project.

    Parameters
    ----------
    store : ProfileStore
        Where profiles are looked up by name.
    config : ProjectConfig
        The project's explicit profile names and inline plugin lines.

    Returns
    -------
    ResolutionResult
        Deduplicated plugins in first-encounter order, every error found
        (missing profiles and unparseable lines), and constraint overrides.
        Errors are collected rather than raised; callers decide whether
        they are fatal.

    Examples
    --------
    >>> class Profiles:
    ...     def load(self, name):
    ...         return {"default": ["p@m"]}.get(name)
    >>> result = resolve_profiles(Profiles(), ProjectConfig(plugins=["p@m", "q@m"]))
    >>> [(p.id, p.source) for p in result.plugins]
    [('p@m', 'default'), ('q@m', 'project')]
    """
    resolver = _Resolver()

    resolver.add_profile(store, DEFAULT_PROFILE, required=False)
    for name in config.profiles:
        resolver.add_profile(store, name, required=True)
    resolver.add_lines(config.plugins, PROJECT_SOURCE)

    result = resolver.result()
    logger.debug(
        f"Resolved {len(result.plugins)} plugins with {len(result.errors)} errors "
        f"from profiles {[DEFAULT_PROFILE, *config.profiles]}"
    )
    return result
