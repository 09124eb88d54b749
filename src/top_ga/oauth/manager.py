"""OAuth Manager — authorization URL, code exchange, refresh, disconnect.

Usage:
    manager = OAuthManager(store, http)
    url = manager.build_authorization_url(record.client_id)
    record = manager.exchange_code_for_tokens(code)
    manager.refresh_if_expired()   # safe to call before every API read
    token = manager.valid_access_token()
"""

from __future__ import annotations

import time
from typing import Callable
from urllib.parse import urlencode

from src.common.config import Settings, settings as default_settings
from src.common.errors import (
    AuthMissingError,
    ConfigMissingError,
    OAuthError,
    TokenMissingError,
    TopGAError,
    UpstreamError,
)
from src.common.http_client import GoogleHTTPClient
from src.common.logging import mask_token, setup_logging

from ..credentials import CredentialRecord, CredentialStore

logger = setup_logging(module_name="top_ga.oauth")

UNKNOWN_EMAIL = "Unknown"


class OAuthManager:
    """Obtains, stores, refreshes, and clears Google OAuth credentials."""

    def __init__(
        self,
        store: CredentialStore,
        http: GoogleHTTPClient | None = None,
        config: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.config = config or default_settings
        self.http = http or GoogleHTTPClient(self.config.google)
        self.clock = clock

    @property
    def redirect_uri(self) -> str:
        return self.config.site.settings_page_url

    def build_authorization_url(self, client_id: str) -> str:
        """Google consent URL for read-only Analytics access with offline refresh."""
        params = {
            "response_type": "code",
            "client_id": client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.config.google.scope,
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.config.google.auth_url}?{urlencode(params)}"

    def exchange_code_for_tokens(
        self,
        code: str,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
    ) -> CredentialRecord:
        """Trade an authorization code for tokens and persist a fresh record.

        Client id/secret default to the stored ones. The stored record is
        fully replaced on success.

        Raises:
            ConfigMissingError: No client id/secret available.
            OAuthError: Google rejected the grant.
            TokenMissingError: Google answered without an access_token.
            TransportError: Google could not be reached.
        """
        stored = self.store.load()
        client_id = client_id or stored.client_id
        client_secret = client_secret or stored.client_secret
        if not client_id or not client_secret:
            raise ConfigMissingError("Client ID and Client Secret must be saved before connecting")

        try:
            data = self.http.post_form(
                self.config.google.token_url,
                {
                    "code": code,
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "redirect_uri": redirect_uri or self.redirect_uri,
                    "grant_type": "authorization_code",
                },
                retry=False,
            )
        except UpstreamError as exc:
            logger.error("Token exchange failed: %s", exc.upstream_message)
            raise OAuthError(
                f"Failed to retrieve access token. Google response: {exc.upstream_message}",
                status_code=exc.status_code,
                error_code=exc.error_code,
                description=exc.description,
            ) from exc

        access_token = data.get("access_token")
        if not access_token:
            logger.error("Token exchange returned no access_token")
            raise TokenMissingError()

        record = CredentialRecord(
            client_id=client_id,
            client_secret=client_secret,
            access_token=access_token,
            refresh_token=data.get("refresh_token") or "",
            expires_at=int(self.clock()) + _expires_in(data),
            email=self._fetch_email(access_token),
        )
        self.store.save(record)
        logger.info("Connected Google account %s", record.email)
        return record

    def refresh_if_expired(self) -> None:
        """Refresh the access token when expired. Never raises.

        No-op without a refresh token or while `now < expires_at`. On
        success only access_token and expires_at change.
        """
        record = self.store.load()
        if not record.refresh_token:
            logger.debug("No refresh token available for token refresh")
            return
        now = self.clock()
        if not record.is_expired(now):
            return

        try:
            data = self.http.post_form(
                self.config.google.token_url,
                {
                    "client_id": record.client_id,
                    "client_secret": record.client_secret,
                    "refresh_token": record.refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        except UpstreamError as exc:
            logger.error("Failed to refresh access token. Google response: %s", exc.upstream_message)
            return
        except TopGAError as exc:
            logger.error("Refresh token request failed: %s", exc)
            return

        access_token = data.get("access_token")
        if not access_token:
            logger.error("Failed to refresh access token. Google response: no access_token")
            return

        record.access_token = access_token
        record.expires_at = int(now) + _expires_in(data)
        self.store.save(record)
        logger.info("Access token refreshed (%s)", mask_token(access_token))

    def valid_access_token(self) -> str:
        """Refresh if needed and return an access token that has not expired.

        Raises:
            AuthMissingError: No token stored, or it expired and could not be refreshed.
        """
        self.refresh_if_expired()
        record = self.store.load()
        if not record.access_token:
            raise AuthMissingError()
        if record.is_expired(self.clock()):
            raise AuthMissingError("Access token expired and could not be refreshed")
        return record.access_token

    def disconnect(self) -> CredentialRecord:
        """Forget tokens and account email; keep client and property settings."""
        record = self.store.load().disconnected()
        self.store.save(record)
        logger.info("Disconnected Google Analytics account")
        return record

    def _fetch_email(self, access_token: str) -> str:
        """Best-effort account email lookup."""
        try:
            user = self.http.get_json(self.config.google.userinfo_url, access_token=access_token)
        except TopGAError as exc:
            logger.warning("User info request failed: %s", exc)
            return UNKNOWN_EMAIL
        return user.get("email") or UNKNOWN_EMAIL


def _expires_in(data: dict) -> int:
    try:
        return int(data.get("expires_in") or 0)
    except (TypeError, ValueError):
        return 0
