"""The public `[top_ga_posts limit=N post_type=T]` shortcode.

Reads only view counts already stored on posts; no network access.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

from src.common.config import VIEWS_META_KEY, SiteSettings
from src.common.logging import setup_logging

from ..post_mapper.repository import PostRepository
from .renderer import DisplayRenderer

logger = setup_logging(module_name="top_ga.shortcode")

SHORTCODE_TAG = "top_ga_posts"

_SHORTCODE_RE = re.compile(r"\[" + SHORTCODE_TAG + r"(?P<atts>(?:\s[^\]]*)?)\]")
_ATTR_RE = re.compile(r"""(\w+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"']+))""")

DEFAULT_LIMIT = 5


class ShortcodeAttributes(BaseModel):
    """Shortcode attributes with defaults for anything missing or invalid."""
    limit: int = DEFAULT_LIMIT
    post_type: str = "post"

    @field_validator("limit", mode="before")
    @classmethod
    def _coerce_limit(cls, value: object) -> int:
        try:
            limit = int(str(value).strip())
        except ValueError:
            return DEFAULT_LIMIT
        return limit if limit > 0 else DEFAULT_LIMIT

    @field_validator("post_type", mode="before")
    @classmethod
    def _coerce_post_type(cls, value: object) -> str:
        return str(value).strip() or "post"


def parse_attributes(text: str) -> ShortcodeAttributes:
    """Parse `limit="5" post_type=post` style attributes; unknown keys are ignored."""
    atts: dict[str, str] = {}
    for match in _ATTR_RE.finditer(text or ""):
        key = match.group(1).lower()
        value = next(g for g in match.groups()[1:] if g is not None)
        atts[key] = value
    known = {k: v for k, v in atts.items() if k in ShortcodeAttributes.model_fields}
    return ShortcodeAttributes(**known)


class TopPostsShortcode:
    """Renders the posts with the highest stored GA view counts."""

    def __init__(
        self,
        repository: PostRepository,
        renderer: DisplayRenderer | None = None,
        site: SiteSettings | None = None,
        meta_key: str = VIEWS_META_KEY,
    ):
        self.repository = repository
        self.renderer = renderer or DisplayRenderer()
        self.site = site or SiteSettings()
        self.meta_key = meta_key

    def render(self, atts: ShortcodeAttributes | dict | None = None) -> str:
        """HTML list of top posts, or a "No posts found." paragraph."""
        if not isinstance(atts, ShortcodeAttributes):
            atts = ShortcodeAttributes(**(atts or {}))
        rows = self.repository.top_by_meta(atts.post_type, self.meta_key, atts.limit)
        items = [
            {"title": post.title, "permalink": self.site.permalink(post.slug), "views": views}
            for post, views in rows
        ]
        return self.renderer.render_top_posts(items)

    def expand(self, content: str) -> str:
        """Replace every `[top_ga_posts ...]` in content with its rendered list."""
        def _replace(match: re.Match) -> str:
            return self.render(parse_attributes(match.group("atts")))

        return _SHORTCODE_RE.sub(_replace, content)
