"""Data model for the stored Google OAuth credentials."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace


@dataclass
class CredentialRecord:
    """OAuth client, tokens, connected account, and selected GA4 property.

    `access_token` is trustworthy only while `now < expires_at`.
    """
    client_id: str = ""
    client_secret: str = ""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0  # unix seconds
    email: str = ""
    property_id: str = ""

    @property
    def has_client(self) -> bool:
        """Client id and secret are both set."""
        return bool(self.client_id and self.client_secret)

    @property
    def is_connected(self) -> bool:
        return bool(self.access_token)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def disconnected(self) -> CredentialRecord:
        """Copy with tokens and account identity cleared."""
        return replace(self, access_token="", refresh_token="", expires_at=0, email="")

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> CredentialRecord:
        """Deserialize from dictionary, tolerating missing keys."""
        data = data or {}
        try:
            expires_at = int(data.get("expires_at") or 0)
        except (TypeError, ValueError):
            expires_at = 0
        return cls(
            client_id=str(data.get("client_id") or ""),
            client_secret=str(data.get("client_secret") or ""),
            access_token=str(data.get("access_token") or ""),
            refresh_token=str(data.get("refresh_token") or ""),
            expires_at=expires_at,
            email=str(data.get("email") or ""),
            property_id=str(data.get("property_id") or ""),
        )
