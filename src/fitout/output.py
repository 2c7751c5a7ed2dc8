"""Rich markup conventions shared by the command formatters."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

SYMBOLS = {
    "present": "[green]✓[/green]",
    "missing": "[red]✗[/red]",
    "extra": "[yellow]?[/yellow]",
    "install": "[cyan]+[/cyan]",
    "outdated": "[yellow]↑[/yellow]",
    "warning": "[yellow]![/yellow]",
}


def header(text: str) -> str:
    return f"[bold]{escape(text)}[/bold]"


def dim(text: str) -> str:
    return f"[dim]{escape(text)}[/dim]"


def provenance(source: str) -> str:
    """Dimmed source tag, colored by layer.

    Examples
    --------
    >>> provenance("default")
    '[dim blue](default)[/dim blue]'
    >>> provenance("backend")
    '[dim cyan](backend)[/dim cyan]'
    """
    style = {"default": "dim blue", "project": "dim magenta"}.get(source, "dim cyan")
    return f"[{style}]({escape(source)})[/{style}]"


def version_label(version: str | None) -> str:
    """Version for display; ``claude`` omits it for some installs.

    Examples
    --------
    >>> version_label("1.2.0"), version_label(None)
    ('v1.2.0', 'unknown version')
    """
    return f"v{version}" if version else "unknown version"


def plural(count: int, noun: str) -> str:
    """Count with a naively pluralized noun.

    Examples
    --------
    >>> plural(1, "plugin"), plural(3, "plugin")
    ('1 plugin', '3 plugins')
    """
    return f"{count} {noun}{'' if count == 1 else 's'}"


def format_context_line(project_root: Path, cwd: Path) -> str:
    """First line of command output naming the project being managed."""
    line = f"{dim('Context:')} {escape(str(project_root))}"
    if cwd != project_root:
        line += f" {dim(f'(from {cwd})')}"
    return line + "\n\n"
