"""CLI entry point for Top GA Posts.

Usage:
    python -m src.top_ga.scheduler.main activate
    python -m src.top_ga.scheduler.main set-credentials --client-id ID --client-secret SECRET
    python -m src.top_ga.scheduler.main auth-url
    python -m src.top_ga.scheduler.main callback --code 4/0Aea...
    python -m src.top_ga.scheduler.main accounts
    python -m src.top_ga.scheduler.main select-property 123456789
    python -m src.top_ga.scheduler.main top-pages --limit 10
    python -m src.top_ga.scheduler.main worst-pages --limit 10
    python -m src.top_ga.scheduler.main update-views
    python -m src.top_ga.scheduler.main render-settings --output settings.html
    python -m src.top_ga.scheduler.main shortcode '[top_ga_posts limit=5]'
    python -m src.top_ga.scheduler.main run
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from src.common.config import Settings
from src.common.logging import setup_logging

from ..plugin import TopGA
from .jobs import build_scheduler, refresh_token, update_post_views

logger = setup_logging(module_name="top_ga.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Top GA Posts — GA4 view counts for site posts")
    parser.add_argument("--config", type=Path, help="Path to settings.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("activate", help="Create the database schema and empty settings")

    creds = sub.add_parser("set-credentials", help="Save the Google OAuth client")
    creds.add_argument("--client-id", required=True)
    creds.add_argument("--client-secret", required=True)

    sub.add_parser("auth-url", help="Print the Google consent URL")

    callback = sub.add_parser("callback", help="Exchange an authorization code for tokens")
    callback.add_argument("--code", default="")

    sub.add_parser("disconnect", help="Forget tokens and account email")
    sub.add_parser("refresh-token", help="Refresh the access token if expired")
    sub.add_parser("accounts", help="List GA4 accounts, properties and data streams")

    select = sub.add_parser("select-property", help="Store the GA4 property to report on")
    select.add_argument("property_id")

    for name in ("top-pages", "worst-pages"):
        report = sub.add_parser(name, help=f"Print the {name.replace('-', ' ')} report")
        report.add_argument("--limit", type=int, default=10)

    update = sub.add_parser("update-views", help="Write GA pageviews onto matching posts")
    update.add_argument("--limit", type=int, default=None, help="GA rows to fetch (default 100)")
    update.add_argument("--post-type", default=None)

    render = sub.add_parser("render-settings", help="Render the settings screen HTML")
    render.add_argument("--output", type=Path, help="Write HTML here instead of stdout")

    shortcode = sub.add_parser("shortcode", help="Expand [top_ga_posts] in the given text")
    shortcode.add_argument("content")

    run = sub.add_parser("run", help="Run both hourly jobs until interrupted")
    run.add_argument("--interval-minutes", type=int, default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    app = TopGA(Settings.load(args.config) if args.config else Settings.load())

    try:
        return _dispatch(app, args)
    finally:
        app.close()


def _dispatch(app: TopGA, args: argparse.Namespace) -> int:
    if args.command == "activate":
        app.activate()
    elif args.command == "set-credentials":
        app.settings_page.save_settings(
            {"client_id": args.client_id, "client_secret": args.client_secret}
        )
    elif args.command == "auth-url":
        record = app.store.load()
        if not record.has_client:
            logger.error("Please enter your Client ID and Client Secret first")
            return 1
        print(app.oauth.build_authorization_url(record.client_id))
    elif args.command == "callback":
        notice = app.settings_page.handle_oauth_callback({"code": args.code})
        if notice is None:
            logger.info("No authorization code given; nothing to do")
            return 0
        print(notice.message)
        return 0 if notice.level == "success" else 1
    elif args.command == "disconnect":
        print(json.dumps(app.settings_page.disconnect()))
    elif args.command == "refresh-token":
        refresh_token(app)
    elif args.command == "accounts":
        tree = app.analytics.list_accounts_properties_streams()
        if tree is None:
            logger.error("Failed to fetch Analytics options. Check logs for details.")
            return 1
        print(json.dumps(tree, indent=2, ensure_ascii=False))
    elif args.command == "select-property":
        app.settings_page.save_settings({"property_id": args.property_id})
    elif args.command in ("top-pages", "worst-pages"):
        return _print_report(app, args.command, args.limit)
    elif args.command == "update-views":
        report = update_post_views(app, args.limit, args.post_type)
        return 0 if report is not None else 1
    elif args.command == "render-settings":
        html = app.settings_page.render()
        if args.output:
            args.output.write_text(html, encoding="utf-8")
            logger.info("Settings screen written to %s", args.output)
        else:
            print(html)
    elif args.command == "shortcode":
        print(app.shortcode.expand(args.content))
    elif args.command == "run":
        scheduler = build_scheduler(app, args.interval_minutes)
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler stopped")
    return 0


def _print_report(app: TopGA, command: str, limit: int) -> int:
    property_id = app.store.load().property_id
    if not property_id:
        logger.error("Please select an Analytics property first")
        return 1

    fetch = app.analytics.top_pages if command == "top-pages" else app.analytics.worst_pages
    stats = fetch(property_id, limit)
    if stats is None:
        logger.error("Failed to fetch %s. Check logs for details.", command.replace("-", " "))
        return 1
    for stat in stats:
        print(f"{stat.formatted:>10}  {stat.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
