"""GA4 reads: account tree and page-view reports."""

from .client import AnalyticsClient, report_body
from .models import GAAccount, GAProperty, PageStat, parse_count

__all__ = [
    "AnalyticsClient",
    "report_body",
    "GAAccount",
    "GAProperty",
    "PageStat",
    "parse_count",
]
