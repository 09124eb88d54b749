"""TopGA — wires the store, Google clients, mapper, and display together.

Usage:
    app = TopGA.from_settings()
    app.activate()
    app.settings_page.render()
"""

from __future__ import annotations

import time
from typing import Callable

import requests

from src.common.config import Settings, settings as default_settings
from src.common.database import init_db
from src.common.http_client import GoogleHTTPClient
from src.common.logging import setup_logging

from . import __version__
from .admin import SettingsPage
from .analytics import AnalyticsClient
from .credentials import CredentialStore
from .display import DisplayRenderer, TopPostsShortcode
from .oauth import OAuthManager
from .post_mapper import PostMapper, PostRepository

logger = setup_logging(module_name="top_ga.plugin")


class TopGA:
    """Container for one site's Top GA Posts components."""

    def __init__(
        self,
        config: Settings | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or default_settings
        db_path = self.config.database.db_path

        self.http = GoogleHTTPClient(self.config.google, session=session)
        self.store = CredentialStore(db_path)
        self.oauth = OAuthManager(self.store, self.http, self.config, clock=clock)
        self.analytics = AnalyticsClient(self.store, self.oauth, self.http, self.config)
        self.repository = PostRepository(db_path)
        self.mapper = PostMapper(self.repository, self.config.site)
        self.renderer = DisplayRenderer()
        self.shortcode = TopPostsShortcode(self.repository, self.renderer, self.config.site)
        self.settings_page = SettingsPage(
            self.store, self.oauth, self.analytics, self.mapper, self.renderer, self.config
        )

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> TopGA:
        return cls(config or Settings.load())

    def activate(self) -> None:
        """Create the schema and the empty credential record (idempotent)."""
        init_db(self.config.database.db_path)
        self.store.ensure()
        logger.info("Top GA Posts %s activated (db=%s)", __version__, self.config.database.db_path)

    def close(self) -> None:
        self.http.close()
