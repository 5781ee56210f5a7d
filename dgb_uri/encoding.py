"""Percent-encoding helpers for payment URI field values."""

from __future__ import annotations

import string
from urllib.parse import quote, unquote_plus

_UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")
_SUB_DELIMS = frozenset("!$&'()*+,;=")
_HEX_DIGITS = frozenset(string.hexdigits)

# Fragments and IP literals have no place in a payment URI, so "#[]" are absent.
URI_CHARACTERS = _UNRESERVED | _SUB_DELIMS | frozenset(":/?@%")
PATH_SEGMENT_CHARACTERS = _UNRESERVED | _SUB_DELIMS | frozenset(":@%")
QUERY_KEY_CHARACTERS = (_UNRESERVED | _SUB_DELIMS | frozenset(":/@%")) - frozenset("&=")


def encode_field(text: str) -> str:
    """Percent-encode ``text`` for use as a query value.

    Spaces become ``%20`` rather than ``+``; ``&`` and ``+`` are always
    escaped and non-ASCII characters are escaped byte by byte as UTF-8.
    """

    return quote(text, safe="", encoding="utf-8", errors="strict")


def decode_field(text: str) -> str:
    """Reverse :func:`encode_field`, also reading ``+`` as a space.

    Raises :class:`UnicodeDecodeError` when the escapes do not form UTF-8.
    """

    return unquote_plus(text, encoding="utf-8", errors="strict")


def _only_allowed(text: str, allowed: frozenset[str]) -> bool:
    index = 0
    while index < len(text):
        char = text[index]
        if char not in allowed:
            return False
        if char == "%":
            escape = text[index + 1 : index + 3]
            if len(escape) != 2 or not all(c in _HEX_DIGITS for c in escape):
                return False
            index += 3
            continue
        index += 1
    return True


def is_valid_uri_text(text: str) -> bool:
    """Return ``True`` when ``text`` only uses characters legal in a URI."""

    return _only_allowed(text, URI_CHARACTERS)


def is_valid_path_segment(text: str) -> bool:
    """Return ``True`` when ``text`` is a well-formed single path segment."""

    return _only_allowed(text, PATH_SEGMENT_CHARACTERS)


def is_valid_query_key(text: str) -> bool:
    """Return ``True`` when ``text`` can stand verbatim as a query key."""

    return bool(text) and _only_allowed(text, QUERY_KEY_CHARACTERS)
