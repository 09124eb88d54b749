"""Credential storage for the Google Analytics connection."""

from .models import CredentialRecord
from .store import CredentialStore

__all__ = ["CredentialRecord", "CredentialStore"]
