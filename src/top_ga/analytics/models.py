"""Data models for GA4 report rows and the account/property/stream tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class PageStat:
    """Pageviews for one GA page path.

    `formatted` keeps the upstream numeric string for display;
    `pageviews` is the integer used for sorting and metadata.
    """
    path: str
    pageviews: int
    formatted: str = ""

    def __post_init__(self) -> None:
        if not self.formatted:
            self.formatted = str(self.pageviews)

    def as_tuple(self) -> tuple[str, int]:
        return (self.path, self.pageviews)

    @classmethod
    def from_row(cls, row: dict) -> PageStat:
        """Build from a runReport row: dimensionValues[0] / metricValues[0]."""
        path = row["dimensionValues"][0]["value"]
        raw = str(row["metricValues"][0]["value"])
        return cls(path=path, pageviews=parse_count(raw), formatted=raw)


@dataclass
class GAProperty:
    """A GA4 property and its data streams (stream id -> display name)."""
    name: str
    views: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"name": self.name, "views": dict(self.views)}


@dataclass
class GAAccount:
    """A GA4 account and its properties (property id -> GAProperty)."""
    name: str
    properties: dict[str, GAProperty] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "properties": {pid: prop.to_dict() for pid, prop in self.properties.items()},
        }


def parse_count(raw: str) -> int:
    """Integer value of an upstream-formatted count ("1234", "1234.0")."""
    try:
        return int(raw)
    except ValueError:
        try:
            return int(float(raw))
        except ValueError:
            logger.warning("Unparseable pageview count %r; using 0", raw)
            return 0


def strip_resource_prefix(name: str, prefix: str) -> str:
    """`accounts/123` -> `123` for prefix `accounts/`."""
    return name[len(prefix):] if name.startswith(prefix) else name
