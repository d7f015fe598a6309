"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'access_token', 'refresh_token',
    'code_verifier', 'cookie'
}


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove sensitive information from log data.

    Passwords are fully redacted. Tokens keep their first 8 characters so
    two log lines about the same token can still be correlated.

    Args:
        data: Dictionary that may contain sensitive fields

    Returns:
        Sanitized copy, safe for logging
    """
    sanitized = dict(data)

    for key, value in sanitized.items():
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if 'token' in lowered and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"

        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized
