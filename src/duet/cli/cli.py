"""Typer CLI entrypoint for duet."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import click
import typer
import yaml
from rich.console import Console
from rich.json import JSON
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from duet.cli.renderers import (
    render_diagnostics,
    render_issues,
    render_preference,
    render_profiles,
    render_theme_preview,
    render_theme_tokens,
)
from duet.config import ConfigError, DuetConfig, load_config
from duet.content import (
    ContentLoadError,
    ContentResolver,
    load_content,
    validate_content,
)
from duet.diagnostics import DiagnosticCollector
from duet.experience import PersonaExperience, build_experience
from duet.onboarding import (
    Back,
    Confirm,
    NavigationSignal,
    OnboardingPhase,
    OnboardingState,
    Select,
)
from duet.persona import PersonaKey, recognized_personas
from duet.preference import (
    FilePreferenceStore,
    InMemoryPreferenceStore,
    PreferenceStoreError,
)
from duet.theme import render_css
from duet.tokens import InvalidTokenSetError

app = typer.Typer(help="Duet persona theming CLI")
preference_app = typer.Typer(help="Inspect or clear the stored persona preference.")
app.add_typer(preference_app, name="preference")

_CONSOLE = Console()
_LOGGING_CONFIGURED = False

ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        file_okay=True,
        dir_okay=False,
        help="Path to duet config YAML/JSON file.",
    ),
]
RootOption = Annotated[
    Path | None,
    typer.Option(
        file_okay=False,
        dir_okay=True,
        help="Base directory for relative config paths.",
    ),
]


def _configure_logging(level: str = "INFO") -> None:
    """Configure Rich-backed logging once for CLI commands.

    Args:
        level: Root log level name.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def _default_config_file(root: Path) -> Path:
    """Return default config path for a project root.

    Args:
        root: Project root directory.

    Returns:
        Config file path, preferring an existing JSON file over YAML.
    """
    yaml_path = root / ".duet" / "config.yaml"
    json_path = root / ".duet" / "config.json"
    if not yaml_path.exists() and json_path.exists():
        return json_path
    return yaml_path


def _load_config_or_exit(config_file: Path | None, root: Path) -> DuetConfig:
    """Load config and configure logging, exiting on invalid payloads.

    Args:
        config_file: Optional config path override.
        root: Project root directory.

    Returns:
        Parsed config.

    Raises:
        Exit: When the config payload is invalid.
    """
    try:
        config = load_config(config_file or _default_config_file(root))
    except ConfigError as exc:
        _configure_logging()
        _CONSOLE.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1) from exc
    _configure_logging(config.logging.level.value)
    return config


def _experience_or_exit(
    config: DuetConfig,
    root: Path,
    *,
    collector: DiagnosticCollector | None = None,
) -> PersonaExperience:
    """Build the facade, exiting when themes or content cannot be loaded.

    Args:
        config: Parsed config.
        root: Project root directory.
        collector: Optional diagnostic collector.

    Returns:
        Persona experience facade.

    Raises:
        Exit: When the theme registry or content payload is invalid.
    """
    try:
        return build_experience(
            config,
            root=root,
            on_navigate=_announce_navigation,
            on_diagnostic=collector,
        )
    except (InvalidTokenSetError, ContentLoadError) as exc:
        _CONSOLE.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1) from exc


def _resolver_for(config: DuetConfig) -> ContentResolver:
    return ContentResolver(
        default_key=config.content.default_key,
        inactive_persona_keys=config.content.inactive_persona_keys,
        default_persona=config.themes.default_persona,
    )


def _load_content_or_exit(path: Path) -> dict[str, object]:
    try:
        return load_content(path)
    except ContentLoadError as exc:
        _CONSOLE.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1) from exc


def _announce_navigation(signal: NavigationSignal, persona: PersonaKey) -> None:
    """Print the navigation signal emitted by a committed onboarding flow.

    Args:
        signal: Skip when a stored preference was found, proceed after confirm.
        persona: Committed persona.
    """
    _CONSOLE.print(
        f"[green]Navigation: {signal.value} (persona: {persona.value})[/green]"
    )


@app.command("init")
def init_command(
    root: RootOption = None,
    config_file: ConfigFileOption = None,
    overwrite_config: Annotated[
        bool,
        typer.Option(
            "--overwrite-config",
            help="Overwrite existing config file with default template.",
        ),
    ] = False,
) -> None:
    """Write the default duet config file.

    Args:
        root: Optional project root override.
        config_file: Optional config file path override.
        overwrite_config: Whether to overwrite existing config payload.
    """
    _configure_logging()
    effective_root = root or Path.cwd()
    effective_config_file = config_file or _default_config_file(effective_root)
    actions: list[tuple[str, str]] = []
    effective_config_file.parent.mkdir(parents=True, exist_ok=True)
    if effective_config_file.exists() and not overwrite_config:
        actions.append(("config", "kept"))
    else:
        existed = effective_config_file.exists()
        payload = DuetConfig().model_dump(mode="json")
        effective_config_file.write_text(
            yaml.safe_dump(payload, sort_keys=False), encoding="utf-8"
        )
        actions.append(("config", "overwritten" if existed else "created"))

    table = Table(title="Duet Init", show_header=True, header_style="bold cyan")
    table.add_column("Resource", style="bold")
    table.add_column("Status", style="green")
    for resource, status in actions:
        table.add_row(resource, status)
    _CONSOLE.print(table)
    _CONSOLE.print(
        Panel(
            f"Root: {effective_root}\nConfig: {effective_config_file}",
            title="Initialized",
            border_style="green",
            expand=True,
        )
    )


@app.command("theme")
def theme_command(
    persona: Annotated[str, typer.Argument(help="Persona key, e.g. male or female.")],
    token: Annotated[
        str | None,
        typer.Option(help="Print a single token by dotted path."),
    ] = None,
    css: Annotated[
        bool,
        typer.Option("--css", help="Print the theme as CSS custom properties."),
    ] = False,
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Show the composed theme for one persona.

    Args:
        persona: Persona key. Unrecognized keys fall back to the default persona.
        token: Optional dotted token path.
        css: Whether to print CSS instead of a token table.
        root: Optional project root override.
        config_file: Optional config file path override.

    Raises:
        Exit: When the token path is unknown.
    """
    effective_root = root or Path.cwd()
    config = _load_config_or_exit(config_file, effective_root)
    collector = DiagnosticCollector()
    experience = _experience_or_exit(config, effective_root, collector=collector)
    theme = experience.get_theme(persona)
    render_diagnostics(_CONSOLE, collector.items)
    if token is not None:
        try:
            value = theme.token(token)
        except KeyError as exc:
            _CONSOLE.print(f"[bold red]Unknown token: {token}[/bold red]")
            raise typer.Exit(code=1) from exc
        _CONSOLE.print(JSON.from_data(value))
        return
    if css:
        _CONSOLE.print(render_css(theme), markup=False, highlight=False)
        return
    render_theme_tokens(_CONSOLE, theme)


@app.command("personas")
def personas_command(
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """List persona profiles, marking the stored preference.

    Args:
        root: Optional project root override.
        config_file: Optional config file path override.
    """
    effective_root = root or Path.cwd()
    config = _load_config_or_exit(config_file, effective_root)
    experience = _experience_or_exit(config, effective_root)
    stored = experience.store.load()
    render_profiles(
        _CONSOLE,
        experience.composer.profiles(),
        active=stored.value if stored is not None else None,
    )


@app.command("content")
def content_command(
    content_file: Annotated[
        Path,
        typer.Argument(dir_okay=False, help="Content YAML/JSON document."),
    ],
    persona: Annotated[str, typer.Argument(help="Persona key to resolve for.")],
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Resolve a content document for one persona and print it as JSON.

    Args:
        content_file: Content document path.
        persona: Persona key.
        root: Optional project root override.
        config_file: Optional config file path override.
    """
    config = _load_config_or_exit(config_file, root or Path.cwd())
    tree = _load_content_or_exit(content_file)
    collector = DiagnosticCollector()
    resolved = _resolver_for(config).resolve(tree, persona, on_diagnostic=collector)
    _CONSOLE.print(JSON.from_data(resolved))
    render_diagnostics(_CONSOLE, collector.items)


@app.command("validate-content")
def validate_content_command(
    content_file: Annotated[
        Path,
        typer.Argument(dir_okay=False, help="Content YAML/JSON document."),
    ],
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Report malformed variant nodes in a content document.

    Args:
        content_file: Content document path.
        root: Optional project root override.
        config_file: Optional config file path override.

    Raises:
        Exit: With code 1 when any issue is found.
    """
    config = _load_config_or_exit(config_file, root or Path.cwd())
    tree = _load_content_or_exit(content_file)
    issues = validate_content(tree, _resolver_for(config))
    render_issues(_CONSOLE, issues)
    if issues:
        raise typer.Exit(code=1)


@preference_app.command("show")
def preference_show_command(
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Show the stored persona preference.

    Args:
        root: Optional project root override.
        config_file: Optional config file path override.
    """
    effective_root = root or Path.cwd()
    config = _load_config_or_exit(config_file, effective_root)
    store = _experience_or_exit(config, effective_root).store
    record = None
    if isinstance(store, FilePreferenceStore | InMemoryPreferenceStore):
        record = store.metadata()
    render_preference(_CONSOLE, record)


@preference_app.command("clear")
def preference_clear_command(
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Delete the stored persona preference.

    Args:
        root: Optional project root override.
        config_file: Optional config file path override.

    Raises:
        Exit: When the preference file cannot be removed.
    """
    effective_root = root or Path.cwd()
    config = _load_config_or_exit(config_file, effective_root)
    store = _experience_or_exit(config, effective_root).store
    try:
        store.clear()
    except PreferenceStoreError as exc:
        _CONSOLE.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1) from exc
    _CONSOLE.print("Persona preference cleared.", style="green")


@app.command("onboard")
def onboard_command(
    reset: Annotated[
        bool,
        typer.Option("--reset", help="Clear any stored preference first."),
    ] = False,
    root: RootOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Run the persona onboarding flow interactively.

    Args:
        reset: Whether to clear the stored preference before starting.
        root: Optional project root override.
        config_file: Optional config file path override.

    Raises:
        Exit: When the user aborts before committing a persona.
    """
    effective_root = root or Path.cwd()
    config = _load_config_or_exit(config_file, effective_root)
    experience = _experience_or_exit(config, effective_root)
    if reset:
        state = experience.reset_onboarding()
    else:
        state = experience.get_onboarding_state()
    if state.phase == OnboardingPhase.COMMITTED:
        _CONSOLE.print(
            f"Stored preference found: [bold]{_persona_label(state)}[/bold]",
            style="cyan",
        )
        return

    try:
        while not state.is_terminal:
            state = _onboarding_step(experience, state)
    except (EOFError, KeyboardInterrupt, click.Abort) as exc:
        _CONSOLE.print("\nOnboarding cancelled.", style="yellow")
        raise typer.Exit(code=1) from exc
    _CONSOLE.print(
        f"Persona committed: [bold]{_persona_label(state)}[/bold]", style="green"
    )


def _onboarding_step(
    experience: PersonaExperience, state: OnboardingState
) -> OnboardingState:
    """Prompt for the next event in the current phase and dispatch it.

    Args:
        experience: Facade driving the flow.
        state: Current interactive state.

    Returns:
        State after the dispatched event.
    """
    if state.phase == OnboardingPhase.SELECTION:
        render_profiles(_CONSOLE, experience.composer.profiles())
        choice = typer.prompt(
            "persona",
            type=click.Choice(
                [persona.value for persona in recognized_personas()],
                case_sensitive=False,
            ),
        )
        return experience.dispatch(Select(persona=choice))

    render_theme_preview(_CONSOLE, experience.get_theme(state.persona))
    if state.error:
        _CONSOLE.print(f"[bold red]{state.error}[/bold red]")
    action = typer.prompt(
        "confirm or back",
        type=click.Choice(["confirm", "back"], case_sensitive=False),
        default="confirm",
    )
    if action.lower() == "back":
        return experience.dispatch(Back())
    return experience.dispatch(Confirm())


def _persona_label(state: OnboardingState) -> str:
    return state.persona.value if state.persona is not None else "unknown"
