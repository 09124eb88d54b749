# Common utilities and shared modules
"""
Shared components used by every Top GA Posts package:
- Database utilities
- Error hierarchy
- Google HTTP transport
- Logging configuration
- Project configuration
"""

from .config import settings, PROJECT_ROOT, DATA_DIR
from .database import get_connection, init_db
from .errors import (
    AuthMissingError,
    ConfigMissingError,
    OAuthError,
    TokenMissingError,
    TopGAError,
    TransportError,
    UpstreamError,
)
from .logging import setup_logging

__all__ = [
    "settings",
    "PROJECT_ROOT",
    "DATA_DIR",
    "get_connection",
    "init_db",
    "setup_logging",
    "AuthMissingError",
    "ConfigMissingError",
    "OAuthError",
    "TokenMissingError",
    "TopGAError",
    "TransportError",
    "UpstreamError",
]
