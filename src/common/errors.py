"""Exception classes for Top GA Posts.

Background jobs log and swallow these; the settings page turns them
into notices for the admin.
"""

from __future__ import annotations

from typing import Any


class TopGAError(Exception):
    """Base exception for all Top GA failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigMissingError(TopGAError):
    """Client id/secret or property id not configured. No request was sent."""


class AuthMissingError(TopGAError):
    """No usable access token: never connected, or expired and not refreshable."""

    def __init__(self, message: str = "Not connected to Google Analytics"):
        super().__init__(message)


class TransportError(TopGAError):
    """Network or HTTP failure reaching Google."""


class UpstreamError(TopGAError):
    """Google answered with a non-200 status or an `error` field."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str = "",
        description: str = "",
    ):
        super().__init__(
            message,
            details={
                "status_code": status_code,
                "error": error_code,
                "error_description": description,
            },
        )
        self.status_code = status_code
        self.error_code = error_code
        self.description = description

    @property
    def upstream_message(self) -> str:
        """`error: description` as reported by Google, when present."""
        if self.error_code:
            return f"{self.error_code}: {self.description}" if self.description else self.error_code
        return self.message


class OAuthError(UpstreamError):
    """The token endpoint rejected a grant."""


class TokenMissingError(UpstreamError):
    """The token endpoint answered without an access_token."""

    def __init__(self, message: str = "No access token returned"):
        super().__init__(message)
