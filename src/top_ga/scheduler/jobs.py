"""Hourly background jobs: token refresh and post view-count update.

Both jobs are fire-and-forget; failures are logged and swallowed.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.common.errors import AuthMissingError, TopGAError
from src.common.logging import setup_logging

from ..plugin import TopGA
from ..post_mapper import MappingReport

logger = setup_logging(module_name="top_ga.scheduler")

REFRESH_JOB_ID = "top_ga_refresh_token"
UPDATE_VIEWS_JOB_ID = "top_ga_update_post_views"


def refresh_token(app: TopGA) -> None:
    """Refresh the stored access token if it has expired."""
    try:
        app.oauth.refresh_if_expired()
    except sqlite3.Error as exc:
        logger.error("Token refresh job failed: %s", exc)


def update_post_views(
    app: TopGA,
    ga_limit: int | None = None,
    post_type: str | None = None,
) -> MappingReport | None:
    """Write the latest GA pageviews onto matching posts.

    Returns the mapping report, or None when the run stopped early.
    """
    if ga_limit is None:
        ga_limit = app.config.jobs.ga_limit
    if post_type is None:
        post_type = app.config.jobs.post_type

    try:
        app.oauth.valid_access_token()
        record = app.store.load()
        if not record.property_id:
            logger.warning("No property ID available for updating post views")
            return None

        stats = app.analytics.top_pages(record.property_id, ga_limit)
        if not stats:
            logger.warning("No GA data found for updating post views")
            return None

        report = app.mapper.apply_view_counts(stats, post_type)
    except AuthMissingError as exc:
        logger.warning("No access token available for updating post views: %s", exc.message)
        return None
    except (TopGAError, sqlite3.Error) as exc:
        logger.error("Post views update failed: %s", exc)
        return None

    logger.info(report.summary())
    return report


def schedule_jobs(
    scheduler: BaseScheduler,
    app: TopGA,
    interval_minutes: int | None = None,
) -> None:
    """Register both jobs on `scheduler`, first run immediately."""
    interval = interval_minutes or app.config.jobs.interval_minutes
    now = datetime.now(timezone.utc)
    for job_id, func in ((REFRESH_JOB_ID, refresh_token), (UPDATE_VIEWS_JOB_ID, update_post_views)):
        scheduler.add_job(
            func,
            trigger=IntervalTrigger(minutes=interval),
            args=[app],
            id=job_id,
            replace_existing=True,
            next_run_time=now,
            coalesce=True,
            max_instances=1,
        )
        logger.info("[Scheduler] Job %s scheduled every %d minutes", job_id, interval)


def build_scheduler(app: TopGA, interval_minutes: int | None = None) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone=timezone.utc)
    schedule_jobs(scheduler, app, interval_minutes)
    return scheduler
