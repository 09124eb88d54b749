"""Data models for content items and GA-path mapping results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MatchStatus(str, Enum):
    """Outcome of mapping one GA path."""
    UPDATED = "updated"
    NO_MATCH = "no_match"


@dataclass
class Post:
    """A content item addressable by (post_type, slug)."""
    id: int
    slug: str
    title: str
    post_type: str = "post"
    status: str = "publish"


@dataclass
class MappingResult:
    """Per-path outcome of `apply_view_counts`."""
    path: str
    slug: str
    pageviews: int
    status: MatchStatus
    post_id: int | None = None

    @property
    def matched(self) -> bool:
        return self.status == MatchStatus.UPDATED


@dataclass
class MappingReport:
    """Summary of one `apply_view_counts` run."""
    post_type: str
    results: list[MappingResult] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return sum(1 for r in self.results if r.matched)

    @property
    def unmatched(self) -> int:
        return sum(1 for r in self.results if not r.matched)

    @property
    def no_match_slugs(self) -> list[str]:
        return [r.slug for r in self.results if not r.matched]

    def summary(self) -> str:
        return (
            f"{len(self.results)} GA paths for '{self.post_type}': "
            f"{self.updated} updated, {self.unmatched} without a matching post"
        )


@dataclass
class MatchedPage:
    """A GA page row joined to its content item, for display only."""
    path: str
    pageviews: str
    post: Post | None = None
    edit_link: str = ""

    @property
    def title(self) -> str | None:
        return self.post.title if self.post else None
