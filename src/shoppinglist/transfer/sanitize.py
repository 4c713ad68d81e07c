"""Sanitization of untrusted export documents before they are stored or shown."""

import warnings
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# Values like "www.example.com" are plain text here, not file names or URLs to fetch
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

# Elements dropped together with their content
_DROPPED_ELEMENTS = [
    "script",
    "style",
    "iframe",
    "noscript",
    "template",
    "object",
    "embed",
    "svg",
    "math",
    "head",
]

# Entity-encoded markup decodes into new markup; a few passes settle it
_MAX_PASSES = 5


def strip_markup(value: str) -> str:
    """Remove every HTML tag from ``value``, keeping only text content.

    Script-like elements lose their content too, so
    ``"<script>alert(1)</script>Trip"`` becomes ``"Trip"``.
    """
    if "<" not in value and "&" not in value:
        return value

    text = value
    for _ in range(_MAX_PASSES):
        soup = BeautifulSoup(text, "html.parser")
        for element in soup.find_all(_DROPPED_ELEMENTS):
            element.decompose()
        stripped = soup.get_text()
        if stripped == text:
            break
        text = stripped
    return text


def escape_quotes(value: str) -> str:
    """Double single quotes.

    Queries are always parameter-bound; this is an extra layer applied to
    display-bound text and is not what keeps SQL safe.
    """
    return value.replace("'", "''")


def sanitize_string(value: str) -> str:
    return escape_quotes(strip_markup(value))


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize every string in ``value``, dictionary keys included.

    Non-string scalars and None pass through unchanged.
    """
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return {
            (sanitize_string(key) if isinstance(key, str) else key): sanitize_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value
