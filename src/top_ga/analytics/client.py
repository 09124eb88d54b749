"""Analytics Client — read-only facade over the GA4 Admin and Data APIs.

Every read returns None when data is unavailable (not connected,
transport failure, upstream error) and logs why; callers display that
as a normal state.

Usage:
    client = AnalyticsClient(store, oauth, http)
    tree = client.list_accounts_properties_streams()
    top = client.top_pages(property_id, limit=10)
"""

from __future__ import annotations

from typing import Any

from src.common.config import Settings, settings as default_settings
from src.common.errors import AuthMissingError, TopGAError
from src.common.http_client import GoogleHTTPClient
from src.common.logging import setup_logging

from ..credentials import CredentialStore
from ..oauth import OAuthManager
from .models import GAAccount, GAProperty, PageStat, strip_resource_prefix

logger = setup_logging(module_name="top_ga.analytics")

PAGE_VIEWS_METRIC = "screenPageViews"


class AnalyticsClient:
    """Fetches GA4 accounts/properties/streams and page-view reports."""

    def __init__(
        self,
        store: CredentialStore,
        oauth: OAuthManager | None = None,
        http: GoogleHTTPClient | None = None,
        config: Settings | None = None,
    ):
        self.store = store
        self.config = config or default_settings
        self.http = http or GoogleHTTPClient(self.config.google)
        self.oauth = oauth or OAuthManager(store, self.http, self.config)

    # --- Accounts / properties / streams ---

    def list_accounts_properties_streams(
        self, shortcut_selected: bool = False
    ) -> dict[str, dict] | None:
        """Walk accounts -> properties -> data streams.

        Returns `{account_id: {name, properties: {property_id: {name, views:
        {stream_id: name}}}}}`, or None if the accounts list is unavailable.
        A failing properties or streams request omits only that branch.

        Args:
            shortcut_selected: When a property is already stored, fetch only
                that property (a single-entry mapping) instead of the full tree.
        """
        token = self._access_token()
        if not token:
            return None

        property_id = self.store.load().property_id
        if shortcut_selected and property_id:
            return self._selected_property_tree(token, property_id)

        admin = self.config.google.admin_api_base
        try:
            accounts_data = self.http.get_json(f"{admin}/accounts", access_token=token)
        except TopGAError as exc:
            logger.error("Failed to fetch GA4 accounts: %s", exc)
            return None

        accounts = accounts_data.get("accounts") or []
        if not accounts:
            logger.warning("No GA4 accounts found in API response")
            return None

        tree: dict[str, GAAccount] = {}
        for account in accounts:
            account_id = strip_resource_prefix(account.get("name", ""), "accounts/")
            entry = GAAccount(name=account.get("displayName", account_id))
            tree[account_id] = entry

            try:
                properties_data = self.http.get_json(
                    f"{admin}/properties",
                    access_token=token,
                    params={"filter": f"parent:accounts/{account_id}"},
                )
            except TopGAError as exc:
                logger.error("Failed to fetch properties for account %s: %s", account_id, exc)
                continue

            for prop in properties_data.get("properties") or []:
                prop_id = strip_resource_prefix(prop.get("name", ""), "properties/")
                entry.properties[prop_id] = GAProperty(
                    name=prop.get("displayName", prop_id),
                    views=self._data_streams(token, prop_id),
                )

        return {account_id: account.to_dict() for account_id, account in tree.items()}

    def _selected_property_tree(self, token: str, property_id: str) -> dict[str, dict] | None:
        admin = self.config.google.admin_api_base
        try:
            prop = self.http.get_json(f"{admin}/properties/{property_id}", access_token=token)
        except TopGAError as exc:
            logger.error("Failed to fetch property %s: %s", property_id, exc)
            return None

        account_id = strip_resource_prefix(prop.get("parent", ""), "accounts/")
        account_name = account_id
        try:
            account = self.http.get_json(f"{admin}/accounts/{account_id}", access_token=token)
            account_name = account.get("displayName") or account_id
        except TopGAError as exc:
            logger.warning("Failed to fetch account %s: %s", account_id, exc)

        entry = GAAccount(name=account_name)
        entry.properties[property_id] = GAProperty(
            name=prop.get("displayName", property_id),
            views=self._data_streams(token, property_id),
        )
        return {account_id: entry.to_dict()}

    def _data_streams(self, token: str, property_id: str) -> dict[str, str]:
        """Stream id -> display name; empty on failure."""
        admin = self.config.google.admin_api_base
        try:
            data = self.http.get_json(
                f"{admin}/properties/{property_id}/dataStreams", access_token=token
            )
        except TopGAError as exc:
            logger.error("Failed to fetch data streams for property %s: %s", property_id, exc)
            return {}

        prefix = f"properties/{property_id}/dataStreams/"
        return {
            strip_resource_prefix(stream.get("name", ""), prefix): stream.get("displayName", "")
            for stream in data.get("dataStreams") or []
        }

    # --- Reports ---

    def top_pages(self, property_id: str, limit: int = 10) -> list[PageStat] | None:
        """Most viewed page paths over the last 30 days, descending."""
        return self._page_report(property_id, limit, descending=True)

    def worst_pages(self, property_id: str, limit: int = 10) -> list[PageStat] | None:
        """Least viewed page paths over the last 30 days, ascending."""
        return self._page_report(property_id, limit, descending=False)

    def _page_report(
        self, property_id: str, limit: int, descending: bool
    ) -> list[PageStat] | None:
        """Run the pagePath x screenPageViews report.

        Returns [] when GA reports zero rows, None on auth/transport failure.
        """
        if not property_id:
            logger.warning("No property ID given for GA4 report")
            return None
        token = self._access_token()
        if not token:
            return None

        url = f"{self.config.google.data_api_base}/properties/{property_id}:runReport"
        try:
            body = self.http.post_json(url, report_body(limit, descending), access_token=token)
        except TopGAError as exc:
            logger.error("Failed to fetch %s pages: %s", "top" if descending else "worst", exc)
            return None

        rows = body.get("rows") or []
        stats: list[PageStat] = []
        for row in rows:
            try:
                stats.append(PageStat.from_row(row))
            except (KeyError, IndexError, TypeError):
                logger.warning("Skipping malformed report row: %r", row)

        stats.sort(key=lambda s: s.pageviews, reverse=descending)
        return stats[:limit]

    def _access_token(self) -> str | None:
        try:
            return self.oauth.valid_access_token()
        except AuthMissingError as exc:
            logger.warning("No access token available for GA4 request: %s", exc.message)
            return None


def report_body(limit: int, descending: bool) -> dict[str, Any]:
    """runReport request body for page paths by page views, last 30 days."""
    return {
        "dateRanges": [{"startDate": "30daysAgo", "endDate": "today"}],
        "dimensions": [{"name": "pagePath"}],
        "metrics": [{"name": PAGE_VIEWS_METRIC}],
        "orderBys": [
            {"metric": {"metricName": PAGE_VIEWS_METRIC}, "desc": descending},
        ],
        "limit": limit,
    }
