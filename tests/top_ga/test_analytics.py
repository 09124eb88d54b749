"""Tests for the Analytics Client: account tree and page-view reports."""

import pytest

from src.top_ga.analytics import PageStat, parse_count, report_body
from src.top_ga.analytics.models import strip_resource_prefix
from src.top_ga.credentials import CredentialRecord

from tests.fakes import NOW, PROPERTY_ID, FakeResponse, report_rows


def _run_report_url(google, property_id=PROPERTY_ID) -> str:
    return f"{google.data_api_base}/properties/{property_id}:runReport"


@pytest.fixture
def admin(google) -> str:
    return google.admin_api_base


@pytest.fixture
def two_accounts(fake_session, admin):
    """acc 1 has one property with a stream; acc 2's properties request fails."""
    fake_session.add(
        "GET",
        f"{admin}/accounts",
        {
            "accounts": [
                {"name": "accounts/1", "displayName": "Main Site"},
                {"name": "accounts/2", "displayName": "Side Project"},
            ]
        },
    )

    def properties(kwargs):
        if kwargs["params"]["filter"] == "parent:accounts/1":
            return FakeResponse(
                200,
                {"properties": [{"name": f"properties/{PROPERTY_ID}", "displayName": "Blog GA4"}]},
            )
        return FakeResponse(403, {"error": {"code": 403, "message": "denied", "status": "PERMISSION_DENIED"}})

    fake_session.add_handler("GET", f"{admin}/properties", properties)
    fake_session.add(
        "GET",
        f"{admin}/properties/{PROPERTY_ID}/dataStreams",
        {
            "dataStreams": [
                {"name": f"properties/{PROPERTY_ID}/dataStreams/777", "displayName": "Web"},
            ]
        },
    )
    return fake_session


class TestModels:
    def test_parse_count(self):
        assert parse_count("1234") == 1234
        assert parse_count("1234.0") == 1234
        assert parse_count("n/a") == 0

    def test_page_stat_keeps_formatted(self):
        stat = PageStat.from_row({"dimensionValues": [{"value": "/a/"}], "metricValues": [{"value": "0042"}]})
        assert stat.pageviews == 42
        assert stat.formatted == "0042"
        assert stat.as_tuple() == ("/a/", 42)

    def test_page_stat_default_formatted(self):
        assert PageStat("/a/", 7).formatted == "7"

    def test_strip_resource_prefix(self):
        assert strip_resource_prefix("accounts/123", "accounts/") == "123"
        assert strip_resource_prefix("123", "accounts/") == "123"

    def test_report_body(self):
        body = report_body(10, descending=False)
        assert body["dateRanges"] == [{"startDate": "30daysAgo", "endDate": "today"}]
        assert body["dimensions"] == [{"name": "pagePath"}]
        assert body["metrics"] == [{"name": "screenPageViews"}]
        assert body["orderBys"] == [{"metric": {"metricName": "screenPageViews"}, "desc": False}]
        assert body["limit"] == 10


class TestAccountTree:
    def test_tree_with_partial_failure(self, connected_app, two_accounts):
        tree = connected_app.analytics.list_accounts_properties_streams()
        assert tree == {
            "1": {
                "name": "Main Site",
                "properties": {PROPERTY_ID: {"name": "Blog GA4", "views": {"777": "Web"}}},
            },
            "2": {"name": "Side Project", "properties": {}},
        }

    def test_streams_failure_gives_empty_views(self, connected_app, two_accounts, admin):
        two_accounts.add("GET", f"{admin}/properties/{PROPERTY_ID}/dataStreams", {"error": {"code": 500}}, status=500)
        tree = connected_app.analytics.list_accounts_properties_streams()
        assert tree["1"]["properties"][PROPERTY_ID]["views"] == {}

    def test_accounts_failure_returns_none(self, connected_app, fake_session, admin):
        fake_session.fail("GET", f"{admin}/accounts")
        assert connected_app.analytics.list_accounts_properties_streams() is None

    def test_no_accounts_returns_none(self, connected_app, fake_session, admin):
        fake_session.add("GET", f"{admin}/accounts", {})
        assert connected_app.analytics.list_accounts_properties_streams() is None

    def test_not_connected_returns_none(self, app, fake_session):
        assert app.analytics.list_accounts_properties_streams() is None
        assert fake_session.calls == []

    def test_bearer_token_sent(self, connected_app, two_accounts, connected_record):
        connected_app.analytics.list_accounts_properties_streams()
        for call in two_accounts.calls:
            assert call["headers"]["Authorization"] == f"Bearer {connected_record.access_token}"

    def test_shortcut_selected_property(self, connected_app, fake_session, admin):
        fake_session.add(
            "GET",
            f"{admin}/properties/{PROPERTY_ID}",
            {"name": f"properties/{PROPERTY_ID}", "parent": "accounts/1", "displayName": "Blog GA4"},
        )
        fake_session.add("GET", f"{admin}/accounts/1", {"name": "accounts/1", "displayName": "Main Site"})
        fake_session.add("GET", f"{admin}/properties/{PROPERTY_ID}/dataStreams", {"dataStreams": []})

        tree = connected_app.analytics.list_accounts_properties_streams(shortcut_selected=True)

        assert tree == {"1": {"name": "Main Site", "properties": {PROPERTY_ID: {"name": "Blog GA4", "views": {}}}}}
        assert not fake_session.calls_to(f"{admin}/accounts")

    def test_refreshes_expired_token_first(self, connected_app, fake_session, google, clock, connected_record, admin):
        clock.now = connected_record.expires_at + 10
        fake_session.add("POST", google.token_url, {"access_token": "ya29.fresh", "expires_in": 3600})
        fake_session.add("GET", f"{admin}/accounts", {"accounts": []})
        connected_app.analytics.list_accounts_properties_streams()
        accounts_call = fake_session.calls_to(f"{admin}/accounts")[0]
        assert accounts_call["headers"]["Authorization"] == "Bearer ya29.fresh"

    def test_failed_refresh_returns_none(self, connected_app, fake_session, google, clock, connected_record, admin):
        clock.now = connected_record.expires_at + 10
        fake_session.fail("POST", google.token_url)
        assert connected_app.analytics.list_accounts_properties_streams() is None
        assert len(fake_session.calls) == 1
        assert not fake_session.calls_to(f"{admin}/accounts")


class TestPageReports:
    ROWS = [("/a", 50), ("/b", 10), ("/c", 200)]

    def test_top_pages_sorted_descending(self, connected_app, fake_session, google):
        fake_session.add("POST", _run_report_url(google), report_rows(self.ROWS))
        stats = connected_app.analytics.top_pages(PROPERTY_ID, limit=2)
        assert [s.as_tuple() for s in stats] == [("/c", 200), ("/a", 50)]
        body = fake_session.calls[0]["json"]
        assert body["orderBys"][0]["desc"] is True
        assert body["limit"] == 2

    def test_worst_pages_sorted_ascending(self, connected_app, fake_session, google):
        fake_session.add("POST", _run_report_url(google), report_rows(self.ROWS))
        stats = connected_app.analytics.worst_pages(PROPERTY_ID, limit=2)
        assert [s.as_tuple() for s in stats] == [("/b", 10), ("/a", 50)]
        assert fake_session.calls[0]["json"]["orderBys"][0]["desc"] is False

    def test_zero_rows_is_empty_list(self, connected_app, fake_session, google):
        fake_session.add("POST", _run_report_url(google), {"rowCount": 0})
        assert connected_app.analytics.top_pages(PROPERTY_ID) == []

    def test_upstream_error_is_none(self, connected_app, fake_session, google):
        fake_session.add(
            "POST",
            _run_report_url(google),
            {"error": {"code": 403, "message": "denied", "status": "PERMISSION_DENIED"}},
            status=403,
        )
        assert connected_app.analytics.top_pages(PROPERTY_ID) is None

    def test_transport_error_is_none(self, connected_app, fake_session, google):
        fake_session.fail("POST", _run_report_url(google))
        assert connected_app.analytics.worst_pages(PROPERTY_ID) is None

    def test_no_token_is_none(self, app, fake_session):
        app.store.save(CredentialRecord(property_id=PROPERTY_ID))
        assert app.analytics.top_pages(PROPERTY_ID) is None
        assert fake_session.calls == []

    def test_expired_token_without_refresh_is_none(self, app, fake_session):
        app.store.save(CredentialRecord(access_token="ya29.stale", expires_at=NOW - 10, property_id=PROPERTY_ID))
        assert app.analytics.top_pages(PROPERTY_ID) is None
        assert fake_session.calls == []

    def test_no_property_is_none(self, connected_app, fake_session):
        assert connected_app.analytics.top_pages("") is None
        assert fake_session.calls == []

    def test_malformed_rows_skipped(self, connected_app, fake_session, google):
        payload = report_rows([("/a", 5)])
        payload["rows"].append({"dimensionValues": []})
        fake_session.add("POST", _run_report_url(google), payload)
        stats = connected_app.analytics.top_pages(PROPERTY_ID)
        assert [s.path for s in stats] == ["/a"]
