"""Rich renderer helpers for duet CLI output."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from duet.content import ContentIssue
from duet.diagnostics import Diagnostic
from duet.persona import PersonaProfile
from duet.preference import StoredPreference
from duet.theme import Theme

_PREVIEW_TOKENS = (
    "colors.primary.main",
    "colors.secondary.main",
    "colors.accent.main",
    "colors.background.primary",
    "colors.text.primary",
    "typography.family.primary",
    "radii.medium",
)


def render_profiles(
    console: Console,
    profiles: Sequence[PersonaProfile],
    *,
    active: str | None = None,
) -> None:
    """Render persona profiles as a table.

    Args:
        console: Rich console.
        profiles: Persona profiles.
        active: Stored persona value, marked in the first column.
    """
    table = Table(title="Personas", show_header=True, header_style="bold cyan")
    table.add_column("Active", style="green", no_wrap=True)
    table.add_column("Persona", style="bold", no_wrap=True)
    table.add_column("Name", style="magenta", no_wrap=True)
    table.add_column("Variant")
    table.add_column("Description")
    for profile in profiles:
        table.add_row(
            "yes" if profile.persona.value == active else "",
            profile.persona.value,
            profile.name,
            profile.variant,
            profile.description,
        )
    console.print(table)


def render_theme_preview(console: Console, theme: Theme) -> None:
    """Render the short preview shown before confirming a persona.

    Args:
        console: Rich console.
        theme: Composed theme.
    """
    details = Table(show_header=False, box=None, expand=True)
    details.add_column("Token", style="bold cyan", no_wrap=True)
    details.add_column("Value")
    for path in _PREVIEW_TOKENS:
        value = theme.tokens.get_path(path)
        if value is None:
            continue
        details.add_row(path, _format_value(value))
    title = f"{theme.profile.name} ({theme.persona.value})"
    console.print(Panel(details, title=title, border_style="magenta", expand=True))
    if theme.profile.description:
        console.print(theme.profile.description, style="italic")


def render_theme_tokens(console: Console, theme: Theme) -> None:
    """Render every leaf token of a theme.

    Args:
        console: Rich console.
        theme: Composed theme.
    """
    table = Table(
        title=f"Theme: {theme.persona.value}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Token", style="bold", no_wrap=True)
    table.add_column("Value")
    for path in theme.tokens.paths():
        value = theme.tokens.get_path(path)
        table.add_row(path, _format_value(value))
    console.print(table)


def render_issues(console: Console, issues: Sequence[ContentIssue]) -> None:
    """Render content validation issues.

    Args:
        console: Rich console.
        issues: Issues found by content validation.
    """
    if not issues:
        console.print("[green]No content issues found.[/green]")
        return
    table = Table(title="Content Issues", show_header=True, header_style="bold red")
    table.add_column("Kind", style="red", no_wrap=True)
    table.add_column("Location", style="bold")
    table.add_column("Declared")
    table.add_column("Message")
    for issue in issues:
        table.add_row(
            issue.kind.value,
            issue.location,
            ", ".join(issue.declared_keys),
            issue.message,
        )
    console.print(table)


def render_diagnostics(console: Console, diagnostics: Sequence[Diagnostic]) -> None:
    """Render recovered resolution diagnostics as warnings.

    Args:
        console: Rich console.
        diagnostics: Collected diagnostics.
    """
    for item in diagnostics:
        where = f" at {item.location}" if item.location else ""
        console.print(
            f"[yellow]{item.code.value}{where}: {escape(item.message)} "
            f"(fallback: {item.fallback})[/yellow]"
        )


def render_preference(console: Console, record: StoredPreference | None) -> None:
    """Render the stored preference.

    Args:
        console: Rich console.
        record: Stored preference, or None when absent.
    """
    if record is None:
        console.print("No persona preference stored.", style="yellow")
        return
    console.print(
        Panel(
            (
                f"Persona: [bold]{record.persona.value}[/bold]\n"
                f"Saved: {record.saved_at.isoformat()}"
            ),
            title="Preference",
            border_style="green",
            expand=True,
        )
    )


def _format_value(value: object) -> str:
    if isinstance(value, tuple):
        return ", ".join(str(item) for item in value)
    return str(value)
