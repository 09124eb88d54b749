"""Tests for the display renderer and the [top_ga_posts] shortcode."""

import pytest
from bs4 import BeautifulSoup

from src.top_ga.admin import Notice, PropertyOption, SettingsView
from src.top_ga.analytics import PageStat
from src.top_ga.display import (
    DisplayRenderer,
    ShortcodeAttributes,
    TopPostsShortcode,
    parse_attributes,
)
from src.top_ga.post_mapper import MatchedPage, Post, PostRepository

from tests.fakes import SITE_URL

VIEWS = "_ga_page_views"


@pytest.fixture
def renderer() -> DisplayRenderer:
    return DisplayRenderer()


@pytest.fixture
def repo(db_path) -> PostRepository:
    return PostRepository(db_path)


@pytest.fixture
def shortcode(repo, renderer, config) -> TopPostsShortcode:
    return TopPostsShortcode(repo, renderer, config.site)


@pytest.fixture
def ranked_posts(repo):
    """Five posts with view counts 10, 20, ... 50."""
    posts = []
    for i in range(1, 6):
        post = repo.add_post(f"post-{i}", f"Post {i}")
        repo.set_meta(post.id, VIEWS, i * 10)
        posts.append(post)
    return posts


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class TestShortcodeAttributes:
    def test_defaults(self):
        atts = ShortcodeAttributes()
        assert atts.limit == 5
        assert atts.post_type == "post"

    @pytest.mark.parametrize("raw", ["abc", "0", "-3", ""])
    def test_invalid_limit_falls_back(self, raw):
        assert ShortcodeAttributes(limit=raw).limit == 5

    def test_parse_attributes(self):
        atts = parse_attributes(' limit="3" post_type=\'page\' color=red')
        assert atts.limit == 3
        assert atts.post_type == "page"

    def test_parse_attributes_empty(self):
        assert parse_attributes("") == ShortcodeAttributes()


class TestTopPostsShortcode:
    def test_renders_highest_first(self, shortcode, ranked_posts):
        soup = _soup(shortcode.render({"limit": 3}))
        items = soup.select("ul > li")
        assert len(items) == 3
        assert items[0].a.get_text() == "Post 5"
        assert items[0].a["href"] == f"{SITE_URL}/post-5/"
        assert "(50 views)" in items[0].get_text()
        assert [li.a.get_text() for li in items] == ["Post 5", "Post 4", "Post 3"]

    def test_default_limit(self, shortcode, ranked_posts, repo):
        extra = repo.add_post("post-6", "Post 6")
        repo.set_meta(extra.id, VIEWS, 5)
        assert len(_soup(shortcode.render()).select("li")) == 5

    def test_no_posts_found(self, shortcode):
        assert shortcode.render() == "<p>No posts found.</p>"

    def test_other_post_type_is_empty(self, shortcode, ranked_posts):
        assert shortcode.render({"post_type": "page"}) == "<p>No posts found.</p>"

    def test_titles_are_escaped(self, shortcode, repo):
        post = repo.add_post("xss", "<script>alert(1)</script>")
        repo.set_meta(post.id, VIEWS, 1)
        html = shortcode.render()
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_expand_replaces_every_occurrence(self, shortcode, ranked_posts):
        content = "Intro [top_ga_posts limit=1] middle [top_ga_posts limit=\"2\"] end [other]"
        html = shortcode.expand(content)
        assert html.startswith("Intro <ul>")
        assert "[top_ga_posts" not in html
        assert "[other]" in html
        assert html.count("<li>") == 3

    def test_expand_bare_tag(self, shortcode, ranked_posts):
        assert shortcode.expand("[top_ga_posts]").count("<li>") == 5

    def test_expand_leaves_similar_tags(self, shortcode):
        assert shortcode.expand("[top_ga_posts_old]") == "[top_ga_posts_old]"


class TestSettingsTemplates:
    def test_form_fields_and_notices(self, renderer):
        view = SettingsView(
            client_id="cid",
            client_secret="secret",
            notices=[Notice("success", "Settings saved.")],
        )
        soup = _soup(renderer.render_settings_page(view))
        assert soup.find("input", attrs={"name": "top_ga_settings[client_id]"})["value"] == "cid"
        assert soup.find("input", attrs={"name": "top_ga_settings[client_secret]"})["value"] == "secret"
        notice = soup.select_one(".notice.notice-success")
        assert notice.get_text(strip=True) == "Settings saved."
        assert "Please enter your Client ID and Client Secret" in soup.get_text()

    def test_property_selector(self, renderer):
        view = SettingsView(
            oauth_state="connected",
            email="owner@example.com",
            property_id="2",
            property_options=[PropertyOption("1", "Main > Blog"), PropertyOption("2", "Main > Shop")],
        )
        soup = _soup(renderer.render_settings_page(view))
        select = soup.find("select", id="analytics_property")
        assert select["name"] == "top_ga_settings[property_id]"
        options = select.find_all("option")
        assert [o.get_text() for o in options] == ["Select a property", "Main > Blog", "Main > Shop"]
        assert options[2].has_attr("selected")
        assert not options[1].has_attr("selected")
        assert soup.find(id="disconnect-oauth") is not None
        assert "owner@example.com" in soup.find("strong").get_text()

    def test_analytics_failure_message(self, renderer):
        view = SettingsView(oauth_state="connected", analytics_failed=True)
        html = renderer.render_settings_page(view)
        assert "Failed to fetch Analytics options. Check logs for details." in html
        assert "analytics_property" not in html

    def test_connect_button(self, renderer):
        view = SettingsView(oauth_state="connect", auth_url="https://accounts.google.com/o/oauth2/auth?a=1&b=2")
        link = _soup(renderer.render_settings_page(view)).find("a", id="connect-oauth")
        assert link["href"] == "https://accounts.google.com/o/oauth2/auth?a=1&b=2"

    def test_report_tables(self, renderer):
        post = Post(id=7, slug="hello", title="Hello")
        view = SettingsView(
            top_pages=[PageStat("/hello/", 1200, "1200")],
            worst_pages=[
                MatchedPage("/hello/", "3", post, f"{SITE_URL}/wp-admin/post.php?post=7&action=edit"),
                MatchedPage("/gone/", "1"),
            ],
        )
        soup = _soup(renderer.render_settings_page(view))
        assert soup.find("h2", string="Top 10 Pages/Posts (Last 30 Days)") is not None
        top_cells = [td.get_text() for td in soup.select("#top-ga-top-pages tbody td")]
        assert top_cells == ["/hello/", "1200"]
        rows = soup.select("#top-ga-worst-posts tbody tr")
        assert rows[0].find("td").get_text() == "Hello"
        assert rows[0].find("a")["href"].endswith("post=7&action=edit")
        assert rows[1].find("td").get_text() == "No matching post"
        assert rows[1].find_all("td")[-1].get_text() == "N/A"

    def test_report_messages_replace_tables(self, renderer):
        view = SettingsView(top_message="No data.", worst_message="Nothing here.")
        soup = _soup(renderer.render_settings_page(view))
        assert soup.select_one(".top-ga-top-message").get_text() == "No data."
        assert soup.select_one(".top-ga-worst-message").get_text() == "Nothing here."
        assert soup.find(id="top-ga-top-pages") is None
        assert soup.find(id="top-ga-worst-posts") is None
