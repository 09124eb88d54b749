# Top GA Posts
"""
Google Analytics 4 view counts for site posts:
- credentials: stored OAuth client, tokens and selected property
- oauth: authorization URL, code exchange, hourly refresh, disconnect
- analytics: GA4 account tree and top/worst page reports
- post_mapper: GA path -> slug -> post, view-count metadata
- display: settings screen templates and the [top_ga_posts] shortcode
- admin: settings screen actions
- scheduler: hourly jobs and CLI
"""

__version__ = "1.0.0"
