"""Google OAuth token lifecycle."""

from .manager import UNKNOWN_EMAIL, OAuthManager

__all__ = ["OAuthManager", "UNKNOWN_EMAIL"]
