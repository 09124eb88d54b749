"""
Display Renderer for the settings screen and the public shortcode.
Handles Jinja2 template loading and rendering; receives plain data only.
"""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.common.config import OPTION_NAME


class DisplayRenderer:
    """
    Renders HTML fragments using Jinja2 templates.

    Usage:
        renderer = DisplayRenderer()
        html = renderer.render_settings_page(view)
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize the display renderer.

        Args:
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_settings_page(self, view: Any) -> str:
        """
        Render the full admin settings screen.

        Args:
            view: SettingsView built by the admin SettingsPage

        Returns:
            Rendered HTML string
        """
        return self.render_section("settings_page", {"view": view, "option_name": OPTION_NAME})

    def render_top_posts(self, items: list[dict[str, Any]]) -> str:
        """Render the `[top_ga_posts]` list (title, permalink, views per item)."""
        return self.render_section("top_posts_shortcode", {"items": items}).strip()

    def render_section(self, section_name: str, context: dict[str, Any]) -> str:
        """
        Render a single section template.

        Args:
            section_name: Template name without extension (e.g., "top_pages")
            context: Template variables

        Returns:
            Rendered HTML string
        """
        template = self.env.get_template(f"{section_name}.jinja2")
        return template.render(**context)
