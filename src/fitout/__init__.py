"""fitout: context-aware plugin manager for Claude Code.

A project lists the plugins it wants in ``.claude/fitout.toml``, optionally
pulling in shared profiles. fitout resolves that into a desired set and
compares it with what the ``claude`` CLI reports as installed.

Public API:
    parse_plugin_reference, parse_plugin_list: Parse config lines
    compare_versions, merge_constraints: Version ordering and merging
    resolve_profiles: Layer profiles and project plugins into a desired set
    diff_plugins: Classify desired vs installed plugins
    find_outdated_plugins: Flag plugins with newer marketplace versions

Example:
    ```python
    from fitout import ProjectConfig, diff_plugins, resolve_profiles
    from fitout.inventory import ClaudeInventory
    from fitout.paths import profiles_dir
    from fitout.profiles import DirectoryProfileStore

    config = ProjectConfig(plugins=["git@pickled-claude-plugins >= 1.2.0"])
    resolution = resolve_profiles(DirectoryProfileStore(profiles_dir()), config)

    inventory = ClaudeInventory()
    diff = diff_plugins(resolution.plugins, inventory.list_installed(), "/work/app")
    ```
"""

from .constraint import merge_constraints
from .constraint import parse_plugin_list
from .constraint import parse_plugin_reference
from .diff import diff_plugins
from .exceptions import ClaudeCommandError
from .exceptions import ConfigFileError
from .exceptions import FitoutError
from .models import AvailablePlugin
from .models import ConstraintOverride
from .models import InstalledPlugin
from .models import OutdatedPlugin
from .models import ParseFailure
from .models import PluginDiff
from .models import PluginReference
from .models import ProjectConfig
from .models import ResolutionResult
from .models import ResolvedPlugin
from .profiles import resolve_profiles
from .versions import compare_versions
from .versions import find_outdated_plugins
from .versions import satisfies

__version__ = "0.1.0"

__all__ = [
    "AvailablePlugin",
    "ClaudeCommandError",
    "ConfigFileError",
    "ConstraintOverride",
    "FitoutError",
    "InstalledPlugin",
    "OutdatedPlugin",
    "ParseFailure",
    "PluginDiff",
    "PluginReference",
    "ProjectConfig",
    "ResolutionResult",
    "ResolvedPlugin",
    "compare_versions",
    "diff_plugins",
    "find_outdated_plugins",
    "merge_constraints",
    "parse_plugin_list",
    "parse_plugin_reference",
    "resolve_profiles",
    "satisfies",
]
