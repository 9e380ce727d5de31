"""
Logging redaction helpers.
Redacts credentials and personal data from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._~\+/]+=*)"), r"\1[REDACTED]"),
    # Session / access tokens in key=value or key: value form
    (
        re.compile(r"(?i)(session[_-]?token|access_token|refresh_token|token)\s*[:=]\s*([A-Za-z0-9\-\._]+)"),
        r"\1=[REDACTED]",
    ),
    # Password fields that slip into request dumps
    (re.compile(r"(?i)(password|password_hash)\s*[:=]\s*(\S+)"), r"\1=[REDACTED]"),
    # E-mail addresses
    (re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}"), "[EMAIL]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format args; let the handler report it as usual
            return True
        record.msg = redact_message(message)
        record.args = ()
        return True


def install_redaction_filter() -> None:
    """
    Attach the filter to every root handler.

    Handler-level filters also see records propagated from child loggers,
    which logger-level filters do not.
    """
    for handler in logging.getLogger().handlers:
        if any(isinstance(existing, RedactingFilter) for existing in handler.filters):
            continue
        handler.addFilter(RedactingFilter())
