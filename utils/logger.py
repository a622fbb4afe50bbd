"""
Logging helpers shared by services and routers.
"""

import hashlib
import logging
from typing import Any, Dict

SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'jwt', 'cookie', 'hashed_password'
}


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def mask_token(value: str | None) -> str | None:
    """
    Replace a token with a short SHA-256 fingerprint.

    Every JWT starts with the same encoded header, so a prefix would not tell
    two tokens apart. The fingerprint does, without exposing the value.
    """
    if not value:
        return value
    return "sha256:" + hashlib.sha256(value.encode()).hexdigest()[:12]


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of data that is safe to pass as logging `extra`.

    Token-like values are replaced by a fingerprint, other secrets are fully redacted.
    Nested dictionaries are sanitized recursively.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        lowered = key.lower()
        if isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        elif any(field in lowered for field in SENSITIVE_FIELDS) and isinstance(value, str):
            if 'token' in lowered or 'jwt' in lowered:
                sanitized[key] = mask_token(value)
            else:
                sanitized[key] = "***REDACTED***"

    return sanitized
