"""Theme registry, composition and export."""

from duet.theme.composer import ThemeComposer, compose
from duet.theme.css import css_variable_name, css_variables, render_css
from duet.theme.models import Theme
from duet.theme.registry import (
    ThemeRegistry,
    bundled_theme_registry,
    bundled_theme_root,
    load_theme_registry,
)

__all__ = [
    "Theme",
    "ThemeComposer",
    "ThemeRegistry",
    "bundled_theme_registry",
    "bundled_theme_root",
    "compose",
    "css_variable_name",
    "css_variables",
    "load_theme_registry",
    "render_css",
]
