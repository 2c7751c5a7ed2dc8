r"""The fitout skill that teaches Claude how to manage project plugins.

Examples
--------
>>> text = render_skill()
>>> parse_frontmatter(text)["name"]
'fitout'
>>> parse_frontmatter("# No frontmatter\n") is None
True
"""

from __future__ import annotations

import logging
import typing as t
from pathlib import Path

import yaml

from .paths import fitout_skill_path

logger = logging.getLogger(__name__)

SKILL_FRONTMATTER = {
    "name": "fitout",
    "description": (
        "Manage Claude Code plugins for the current project with fitout. Use when the "
        "user asks which plugins a project uses, wants to add or pin a plugin, or sees "
        "fitout hook messages."
    ),
}

SKILL_BODY = """\
# fitout

Project plugins are declared in `.claude/fitout.toml`:

```toml
profiles = ["backend"]
plugins = [
  "git@pickled-claude-plugins",
  "ci@pickled-claude-plugins >= 1.2.0",
]
```

Only `>=` version constraints are supported. Profiles live in
`~/.config/fitout/profiles/<name>.toml`; a `default` profile applies to
every project.

- `fitout status` shows present, missing, extra and outdated plugins.
- `fitout install` installs missing plugins and updates ones below their minimum.
- `fitout update [PLUGIN...]` updates outdated plugins.

After installs, the user must restart Claude Code.
"""


def render_skill() -> str:
    """Render ``SKILL.md`` with YAML frontmatter."""
    frontmatter = yaml.safe_dump(SKILL_FRONTMATTER, sort_keys=False, width=88)
    return f"---\n{frontmatter}---\n\n{SKILL_BODY}"


def parse_frontmatter(text: str) -> dict[str, t.Any] | None:
    """Parse YAML frontmatter from markdown text, or None if there is none."""
    if not text.startswith("---"):
        return None
    end = text.find("---", 3)
    if end == -1:
        return None
    loaded = t.cast("object", yaml.safe_load(text[3:end].strip()))
    if isinstance(loaded, dict):
        return t.cast("dict[str, t.Any]", loaded)
    return None


def install_skill(path: Path | None = None) -> bool:
    """Write the skill if it is missing or differs from the current one.

    Returns
    -------
    bool
        True if the file was written.
    """
    path = path or fitout_skill_path()
    content = render_skill()
    if path.exists() and path.read_text(encoding="utf-8") == content:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote fitout skill to {path}")
    return True
