"""Centralized error handling utilities for safe error logging and reporting."""

import re

# Patterns that might indicate sensitive data
SENSITIVE_PATTERNS = [
    r"password\s*[:=]\s*['\"]?([^'\"\s]+)['\"]?",
    r"postgres(?:ql)?(?:\+asyncpg)?://[^:/@\s]+:([^@\s]+)@",  # Database password in URL
]


def sanitize_error_message(message: str) -> str:
    """
    Sanitize error message to remove potentially sensitive data.

    Args:
        message: The error message to sanitize

    Returns:
        Sanitized error message with sensitive data masked
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: (
                m.group(0).replace(m.group(1), "***REDACTED***")
                if m.lastindex
                else m.group(0)
            ),
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def truncate_error_message(error: BaseException, max_length: int = 200) -> str:
    """
    Truncate long error messages to keep logs clean and prevent information leakage.

    Also sanitizes sensitive data from error messages.

    Args:
        error: The exception to format
        max_length: Maximum length of the error message

    Returns:
        Truncated and sanitized error message
    """
    error_str = sanitize_error_message(str(error)) or type(error).__name__

    if len(error_str) > max_length:
        error_str = error_str[:max_length] + "..."

    return error_str


def safe_url(url: str) -> str:
    """Return the host/database part of a connection URL, without credentials."""
    return url.split("@")[-1] if "@" in url else url
