"""
Security utilities for the Queue Worker service.

This module redacts sensitive values from structured log records before they
are serialized. Message payloads are logged as they arrive, so anything a
producer puts on the queue can end up in CloudWatch unless it is masked here.

Redaction is key based:
- Keys are compared case-insensitively with ``_`` and ``-`` removed, so
  ``apiKey``, ``api_key`` and ``API-KEY`` all match.
- Values under a sensitive key are replaced wholesale, whatever their type.
- Dicts and lists are walked recursively; everything else is left untouched.
"""

from typing import Any

REDACTED = "[REDACTED]"

# Normalized (lower-case, no separators) field names whose values are masked.
SENSITIVE_FIELD_NAMES: frozenset[str] = frozenset(
    {
        "authorization",
        "cookie",
        "setcookie",
        "email",
        "password",
        "passwd",
        "token",
        "accesstoken",
        "refreshtoken",
        "idtoken",
        "secret",
        "clientsecret",
        "apikey",
        "awssecretaccesskey",
        "awssessiontoken",
    }
)


def _normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def is_sensitive_key(key: Any) -> bool:
    """True if a mapping key names a field whose value must not be logged."""
    if not isinstance(key, str):
        return False
    return _normalize_key(key) in SENSITIVE_FIELD_NAMES


def redact_sensitive(data: Any) -> Any:
    """
    Return a copy of ``data`` with the values of sensitive keys masked.

    The input is never mutated. Tuples come back as lists, matching what the
    JSON serializer would emit for them anyway.

    Examples:
        >>> redact_sensitive({"username": "jane", "email": "jane@example.com"})
        {'username': 'jane', 'email': '[REDACTED]'}

        >>> redact_sensitive({"headers": {"Authorization": "Bearer abc"}})
        {'headers': {'Authorization': '[REDACTED]'}}
    """
    if isinstance(data, dict):
        return {
            key: REDACTED if is_sensitive_key(key) else redact_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive(item) for item in data]
    return data
