"""CSS custom property export for composed themes."""

from __future__ import annotations

from duet.theme.models import Theme
from duet.tokens import PATH_SEPARATOR

_VARIABLE_PREFIX = "--"


def css_variable_name(path: str, *, prefix: str = "") -> str:
    """Convert a dotted token path into a CSS custom property name.

    Args:
        path: Dotted token path, e.g. ``colors.primary.main``.
        prefix: Optional namespace, e.g. ``duet``.

    Returns:
        Property name such as ``--colors-primary-main``.
    """
    name = path.replace(PATH_SEPARATOR, "-")
    if prefix:
        name = f"{prefix}-{name}"
    return f"{_VARIABLE_PREFIX}{name}"


def css_variables(theme: Theme, *, prefix: str = "") -> dict[str, str]:
    """Flatten every theme leaf into CSS custom properties.

    Null tokens are skipped. Sequences are joined with ``, `` which matches how
    font stacks and gradient stops are written in CSS.

    Args:
        theme: Composed theme.
        prefix: Optional property namespace.

    Returns:
        Property name to CSS value, sorted by token path.
    """
    variables: dict[str, str] = {}
    for path in theme.tokens.paths():
        value = theme.tokens.get_path(path)
        rendered = _render_value(value)
        if rendered is None:
            continue
        variables[css_variable_name(path, prefix=prefix)] = rendered
    return variables


def render_css(theme: Theme, *, selector: str | None = None, prefix: str = "") -> str:
    """Render a theme as one CSS rule block.

    Args:
        theme: Composed theme.
        selector: Rule selector; defaults to ``:root[data-theme="<persona>"]``.
        prefix: Optional property namespace.

    Returns:
        CSS text ending with a newline.
    """
    effective_selector = selector or f':root[data-theme="{theme.name}"]'
    lines = [f"{effective_selector} {{"]
    lines.extend(
        f"  {name}: {value};"
        for name, value in css_variables(theme, prefix=prefix).items()
    )
    lines.append("}")
    return "\n".join(lines) + "\n"


def _render_value(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, tuple):
        parts = [_render_value(item) for item in value]
        return ", ".join(part for part in parts if part is not None)
    if isinstance(value, (str, int, float)):
        return str(value)
    # Empty nested groups are reported as leaves; nothing to emit.
    return None
