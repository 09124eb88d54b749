"""Mapping of GA page paths to posts and view-count metadata."""

from .mapper import PostMapper, map_path_to_slug
from .models import MappingReport, MappingResult, MatchedPage, MatchStatus, Post
from .repository import PostRepository

__all__ = [
    "PostMapper",
    "map_path_to_slug",
    "MappingReport",
    "MappingResult",
    "MatchedPage",
    "MatchStatus",
    "Post",
    "PostRepository",
]
