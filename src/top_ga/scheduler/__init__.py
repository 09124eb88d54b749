"""Hourly jobs and the command line entry point."""

from .jobs import (
    REFRESH_JOB_ID,
    UPDATE_VIEWS_JOB_ID,
    build_scheduler,
    refresh_token,
    schedule_jobs,
    update_post_views,
)

__all__ = [
    "REFRESH_JOB_ID",
    "UPDATE_VIEWS_JOB_ID",
    "build_scheduler",
    "refresh_token",
    "schedule_jobs",
    "update_post_views",
]
