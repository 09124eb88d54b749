"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

# === Fixed names shared with the stored data ===
OPTION_NAME = "top_ga_settings"
VIEWS_META_KEY = "_ga_page_views"
SETTINGS_PAGE_SLUG = "top-ga-settings"


class DatabaseSettings(BaseModel):
    """Database connection settings."""
    db_path: str = str(DATA_DIR / "top_ga.db")


class GoogleSettings(BaseModel):
    """Google OAuth and API endpoints."""
    auth_url: str = "https://accounts.google.com/o/oauth2/auth"
    token_url: str = "https://oauth2.googleapis.com/token"
    userinfo_url: str = "https://www.googleapis.com/oauth2/v3/userinfo"
    admin_api_base: str = "https://analyticsadmin.googleapis.com/v1beta"
    data_api_base: str = "https://analyticsdata.googleapis.com/v1beta"
    scope: str = "https://www.googleapis.com/auth/analytics.readonly"
    request_timeout: float = 15.0
    max_retries: int = 3
    backoff_base: float = 2.0


class SiteSettings(BaseModel):
    """Public URLs of the host site."""
    site_url: str = "http://localhost:8000"

    @property
    def base(self) -> str:
        return self.site_url.rstrip("/")

    @property
    def settings_page_url(self) -> str:
        """The admin settings screen; also the OAuth redirect URI."""
        return f"{self.base}/wp-admin/options-general.php?page={SETTINGS_PAGE_SLUG}"

    def permalink(self, slug: str) -> str:
        return f"{self.base}/{slug}/"

    def edit_link(self, post_id: int) -> str:
        return f"{self.base}/wp-admin/post.php?post={post_id}&action=edit"


class JobSettings(BaseModel):
    """Background job settings."""
    interval_minutes: int = 60
    ga_limit: int = 100
    post_type: str = "post"
    table_limit: int = 10
    shortcode_limit: int = 5


class Settings(BaseModel):
    """Top-level application settings."""
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)
    jobs: JobSettings = Field(default_factory=JobSettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, then apply env overrides."""
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        loaded = cls(**data)
        loaded.apply_env()
        return loaded

    def apply_env(self) -> None:
        """Override fields from TOP_GA_* environment variables."""
        if db_path := os.getenv("TOP_GA_DB_PATH"):
            self.database.db_path = db_path
        if site_url := os.getenv("TOP_GA_SITE_URL"):
            self.site.site_url = site_url
        if timeout := os.getenv("TOP_GA_REQUEST_TIMEOUT"):
            self.google.request_timeout = float(timeout)
        if retries := os.getenv("TOP_GA_MAX_RETRIES"):
            self.google.max_retries = int(retries)
        if interval := os.getenv("TOP_GA_JOB_INTERVAL_MINUTES"):
            self.jobs.interval_minutes = int(interval)


# Singleton settings instance
settings = Settings.load()
