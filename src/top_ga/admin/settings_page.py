"""Admin settings screen: credential form, OAuth callback, disconnect, report tables.

The screen is built in two steps: `build_view()` gathers plain data from
the store, the Analytics Client and the Post Mapper; the DisplayRenderer
turns it into HTML.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from src.common.config import Settings, settings as default_settings
from src.common.errors import ConfigMissingError, TopGAError
from src.common.logging import setup_logging

from ..analytics import AnalyticsClient, PageStat
from ..credentials import CredentialStore
from ..display import DisplayRenderer
from ..oauth import OAuthManager
from ..post_mapper import MatchedPage, PostMapper

logger = setup_logging(module_name="top_ga.admin")


@dataclass
class Notice:
    """A dismissible admin message."""
    level: str  # success | error | warning
    message: str


@dataclass
class PropertyOption:
    value: str
    label: str


@dataclass
class SettingsView:
    """Everything the settings template shows."""
    form_action: str = ""
    disconnect_action: str = ""
    client_id: str = ""
    client_secret: str = ""
    property_id: str = ""
    notices: list[Notice] = field(default_factory=list)
    property_options: list[PropertyOption] | None = None
    analytics_failed: bool = False
    oauth_state: str = "missing"  # connected | connect | missing
    email: str = ""
    auth_url: str = ""
    table_limit: int = 10
    top_pages: list[PageStat] = field(default_factory=list)
    top_message: str = ""
    worst_pages: list[MatchedPage] = field(default_factory=list)
    worst_message: str = ""


class SettingsPage:
    """Handles the admin screen's actions and renders it."""

    def __init__(
        self,
        store: CredentialStore,
        oauth: OAuthManager,
        analytics: AnalyticsClient,
        mapper: PostMapper,
        renderer: DisplayRenderer | None = None,
        config: Settings | None = None,
    ):
        self.store = store
        self.oauth = oauth
        self.analytics = analytics
        self.mapper = mapper
        self.renderer = renderer or DisplayRenderer()
        self.config = config or default_settings

    # --- Actions ---

    def save_settings(self, form: Mapping[str, object]) -> Notice:
        """Persist submitted client id/secret/property selection."""
        self.store.update_settings(dict(form))
        return Notice("success", "Settings saved.")

    def handle_oauth_callback(self, query: Mapping[str, str]) -> Notice | None:
        """Process `?code=...` after Google consent; no-op when `code` is absent."""
        code = (query.get("code") or "").strip()
        if not code:
            return None

        try:
            record = self.oauth.exchange_code_for_tokens(code)
        except ConfigMissingError as exc:
            return Notice("error", exc.message)
        except TopGAError as exc:
            logger.error("OAuth callback failed: %s", exc)
            return Notice("error", f"OAuth failed: {exc.message}")

        return Notice("success", f"Successfully connected to Google Analytics as {record.email}!")

    def disconnect(self) -> dict:
        """Clear tokens; returns the JSON-style success payload."""
        self.oauth.disconnect()
        return {"success": True}

    # --- Screen ---

    def build_view(self, notices: list[Notice] | None = None) -> SettingsView:
        record = self.store.load()
        limit = self.config.jobs.table_limit
        view = SettingsView(
            form_action=self.config.site.settings_page_url,
            disconnect_action=f"{self.config.site.settings_page_url}&action=disconnect",
            client_id=record.client_id,
            client_secret=record.client_secret,
            property_id=record.property_id,
            notices=list(notices or []),
            table_limit=limit,
        )

        if record.is_connected:
            view.oauth_state = "connected"
            view.email = record.email
            tree = self.analytics.list_accounts_properties_streams()
            if tree is None:
                view.analytics_failed = True
            else:
                view.property_options = property_options(tree)
        elif record.has_client:
            view.oauth_state = "connect"
            view.auth_url = self.oauth.build_authorization_url(record.client_id)

        property_id = record.property_id
        if not property_id:
            view.top_message = "Please select an Analytics property and save settings to see top pages."
            view.worst_message = (
                "Please select an Analytics property and save settings to see worst performing posts."
            )
            return view
        if not record.is_connected:
            view.top_message = "Connect to Google Analytics to see top pages."
            view.worst_message = "Connect to Google Analytics to see worst performing posts."
            return view

        top = self.analytics.top_pages(property_id, limit)
        if top is None:
            view.top_message = "Failed to fetch top pages. Check logs for details."
        elif not top:
            view.top_message = "No page data available for the selected property in the last 30 days."
        else:
            view.top_pages = top

        worst = self.analytics.worst_pages(property_id, limit)
        if not worst:
            view.worst_message = "No GA data available for worst performing posts."
        else:
            view.worst_pages = self.mapper.match_pages(worst, self.config.jobs.post_type)
        return view

    def render(self, notices: list[Notice] | None = None) -> str:
        return self.renderer.render_settings_page(self.build_view(notices))


def property_options(tree: Mapping[str, dict]) -> list[PropertyOption]:
    """Flatten the account tree into `Account > Property` select options."""
    options = []
    for account in tree.values():
        for property_id, prop in account.get("properties", {}).items():
            options.append(PropertyOption(property_id, f"{account['name']} > {prop['name']}"))
    return options
