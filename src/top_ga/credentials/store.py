"""Credential Store — the single named CredentialRecord in the options table."""

from __future__ import annotations

import json
import logging

from src.common.config import OPTION_NAME
from src.common.database import get_connection

from .models import CredentialRecord

logger = logging.getLogger(__name__)

# Keys the settings form may submit
_TEXT_FIELDS = ("client_id", "client_secret", "access_token", "refresh_token", "email", "property_id")


class CredentialStore:
    """Reads and writes the credential record through the key/value options table.

    Usage:
        store = CredentialStore(db_path)
        record = store.load()
        store.save(record)
    """

    def __init__(self, db_path: str | None = None, option_name: str = OPTION_NAME):
        self.db_path = db_path
        self.option_name = option_name

    def load(self) -> CredentialRecord:
        """Return the stored record, or an empty one if none exists."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT value FROM options WHERE name = ?", (self.option_name,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return CredentialRecord()
        try:
            return CredentialRecord.from_dict(json.loads(row["value"]))
        except json.JSONDecodeError:
            logger.warning("Stored option %s is not valid JSON; treating as empty", self.option_name)
            return CredentialRecord()

    def save(self, record: CredentialRecord) -> None:
        """Replace the stored record entirely."""
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO options (name, value) VALUES (?, ?) "
                "ON CONFLICT(name) DO UPDATE SET value = excluded.value",
                (self.option_name, json.dumps(record.to_dict())),
            )
            conn.commit()
        finally:
            conn.close()

    def ensure(self) -> CredentialRecord:
        """Create the empty record if absent; return the current one."""
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT OR IGNORE INTO options (name, value) VALUES (?, ?)",
                (self.option_name, json.dumps(CredentialRecord().to_dict())),
            )
            conn.commit()
        finally:
            conn.close()
        return self.load()

    def update_settings(self, form: dict) -> CredentialRecord:
        """Merge submitted settings into the stored record.

        Only keys present in `form` are overwritten; text is trimmed and
        `expires_at` coerced to int.
        """
        data = self.load().to_dict()
        for key in _TEXT_FIELDS:
            if key in form and form[key] is not None:
                data[key] = str(form[key]).strip()
        if "expires_at" in form:
            try:
                data["expires_at"] = int(form["expires_at"])
            except (TypeError, ValueError):
                data["expires_at"] = 0

        record = CredentialRecord.from_dict(data)
        self.save(record)
        logger.info("Settings saved (property_id=%s)", record.property_id or "<none>")
        return record
