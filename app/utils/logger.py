# app/utils/logger.py
"""
Centralised logging configuration for the entire API.
Logs to console and to a rotating file in /logs/.
Also provides redaction helpers so tokens and e-mail addresses never reach the log files.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

SENSITIVE_FIELDS = ("password", "token", "secret", "key", "auth", "bearer",
                    "jwt", "session", "cookie", "credential", "private")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    # Rotating file handler - keeps last 10 × 5MB log files
    file_handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, "api.log"),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    file_handler.setLevel(LOG_LEVEL)
    file_handler.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)


def mask_email(email: Optional[str]) -> str:
    """j***n@example.com - keeps first/last char of the local part."""
    if not email:
        return "no-email"
    local, _, domain = email.partition("@")
    if not domain:
        return "***@unknown"
    masked_local = f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}" if len(local) > 2 else "***"
    return f"{masked_local}@{domain}"


def redact(data):
    """Recursively replace values of sensitive-looking keys with [REDACTED]."""
    if isinstance(data, dict):
        clean = {}
        for k, v in data.items():
            if any(s in str(k).lower() for s in SENSITIVE_FIELDS):
                clean[k] = "[REDACTED]"
            else:
                clean[k] = redact(v)
        return clean
    if isinstance(data, list):
        return [redact(v) for v in data]
    return data
