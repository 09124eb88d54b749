# Display Module
# Jinja2 templates for the settings screen and the public shortcode

from .renderer import DisplayRenderer
from .shortcode import (
    SHORTCODE_TAG,
    ShortcodeAttributes,
    TopPostsShortcode,
    parse_attributes,
)

__all__ = [
    "DisplayRenderer",
    "SHORTCODE_TAG",
    "ShortcodeAttributes",
    "TopPostsShortcode",
    "parse_attributes",
]
