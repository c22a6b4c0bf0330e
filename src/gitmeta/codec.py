"""Reversible mapping between repository paths and flat store keys."""

from __future__ import annotations

import re

KEY_PREFIX = "@"
ESCAPE = "%"
SEPARATOR = "/"

_ESCAPED_ESCAPE = "%25"
_ESCAPED_SEPARATOR = "%2F"
_INVALID_ESCAPE = re.compile(r"%(?!25|2F)")


class MalformedKeyError(ValueError):
    """Raised when a store key cannot be decoded back into a repository path."""


def encode_key(path: str) -> str:
    """Return the flat store key for the repository path ``path``."""

    escaped = path.replace(ESCAPE, _ESCAPED_ESCAPE).replace(SEPARATOR, _ESCAPED_SEPARATOR)
    return f"{KEY_PREFIX}{escaped}"


def decode_key(key: str) -> str:
    """Return the repository path stored under ``key``."""

    if not key.startswith(KEY_PREFIX):
        raise MalformedKeyError(f"Store key '{key}' is missing the '{KEY_PREFIX}' prefix")

    body = key[len(KEY_PREFIX) :]
    if SEPARATOR in body or _INVALID_ESCAPE.search(body):
        raise MalformedKeyError(f"Store key '{key}' contains an invalid escape sequence")

    # %2F first: a literal "%2F" in a path is stored as "%252F".
    path = body.replace(_ESCAPED_SEPARATOR, SEPARATOR).replace(_ESCAPED_ESCAPE, ESCAPE)
    if not path:
        raise MalformedKeyError(f"Store key '{key}' decodes to an empty path")
    return path
