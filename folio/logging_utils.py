"""
Logging setup shared by the web app and the scripts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from folio.config import get_settings

LOG_FORMAT = "%(name)s %(levelname)s %(asctime)s %(message)s"
LOG_DATEFMT = "%m/%d/%Y %I:%M:%S %p"

# Transient Firestore connectivity chatter; it resolves on its own.
FIREBASE_NOISE = (
    "Could not reach Cloud Firestore backend",
    "Connection failed",
    "The operation could not be completed",
    "operate in offline mode",
)
FIREBASE_LOGGERS = ("google", "firebase_admin", "grpc")

security_logger = logging.getLogger("folio.security")


class FirebaseNoiseFilter(logging.Filter):
    """
    Drops Firebase connectivity warnings unless verbose logging is on.

    Installed on the root handlers so records from any child logger of the
    SDKs (google.cloud.firestore_v1.watch, google.api_core.*, ...) are seen.
    """

    def __init__(self, verbose: bool = False):
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True
        if not any(
            record.name == name or record.name.startswith(name + ".")
            for name in FIREBASE_LOGGERS
        ):
            return True
        message = record.getMessage()
        return not any(noise in message for noise in FIREBASE_NOISE)


def configure_logging(level: str = "INFO", verbose_firebase_logs: bool = False) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    noise_filter = FirebaseNoiseFilter(verbose=verbose_firebase_logs)
    for handler in logging.getLogger().handlers:
        # Idempotent across repeated create_app() calls.
        for existing in [f for f in handler.filters if isinstance(f, FirebaseNoiseFilter)]:
            handler.removeFilter(existing)
        handler.addFilter(noise_filter)


def configure_script_logging() -> None:
    """Applies LOG_LEVEL and the Firebase noise filter for the command-line scripts."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.verbose_firebase_logs)


def log_security_event(event: str, **details) -> None:
    """Record a security-relevant event (bot hits, failed logins, ...)."""
    security_logger.warning(
        "security_event=%s at=%s details=%s",
        event,
        datetime.now(timezone.utc).isoformat(),
        details,
    )
