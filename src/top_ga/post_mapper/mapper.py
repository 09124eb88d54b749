"""Post Mapper — GA page path -> slug -> content item -> view-count metadata."""

from __future__ import annotations

from typing import Iterable

from src.common.config import VIEWS_META_KEY, SiteSettings
from src.common.logging import setup_logging

from ..analytics.models import PageStat
from .models import MappingReport, MappingResult, MatchedPage, MatchStatus
from .repository import PostRepository

logger = setup_logging(module_name="top_ga.post_mapper")


def map_path_to_slug(path: str) -> str:
    """Last non-empty segment of a GA page path.

    Leading/trailing slashes never matter: "/blog/my-post/" -> "my-post".
    Paths whose last segment is not a slug (pagination, query strings,
    archives) will not match any post.
    """
    segments = [s for s in path.strip("/").split("/") if s]
    return segments[-1] if segments else ""


class PostMapper:
    """Joins GA page stats to posts and stores the latest view count per post."""

    def __init__(
        self,
        repository: PostRepository,
        site: SiteSettings | None = None,
        meta_key: str = VIEWS_META_KEY,
    ):
        self.repository = repository
        self.site = site or SiteSettings()
        self.meta_key = meta_key

    def apply_view_counts(self, stats: Iterable[PageStat], post_type: str = "post") -> MappingReport:
        """Overwrite each matched post's view count with its GA pageviews.

        An unmatched path is recorded as a no-match event and never stops
        the rest of the batch.
        """
        report = MappingReport(post_type=post_type)
        for stat in stats:
            slug = map_path_to_slug(stat.path)
            post = self.repository.find_by_slug(slug, post_type)
            if post is None:
                logger.warning("No matching post found for slug '%s'", slug)
                report.results.append(
                    MappingResult(stat.path, slug, stat.pageviews, MatchStatus.NO_MATCH)
                )
                continue

            self.repository.set_meta(post.id, self.meta_key, stat.pageviews)
            logger.info("Updated post ID %d with %d views", post.id, stat.pageviews)
            report.results.append(
                MappingResult(stat.path, slug, stat.pageviews, MatchStatus.UPDATED, post_id=post.id)
            )
        return report

    def match_pages(self, stats: Iterable[PageStat], post_type: str = "post") -> list[MatchedPage]:
        """Resolve each stat to its post for display; writes nothing."""
        pages = []
        for stat in stats:
            post = self.repository.find_by_slug(map_path_to_slug(stat.path), post_type)
            pages.append(
                MatchedPage(
                    path=stat.path,
                    pageviews=stat.formatted,
                    post=post,
                    edit_link=self.site.edit_link(post.id) if post else "",
                )
            )
        return pages
