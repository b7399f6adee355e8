"""
Pure helpers that turn operator input into safe identifiers, links and
config maps. Nothing here performs I/O.
"""
import re
import unicodedata
from typing import Any, Dict, Iterable, Mapping, Optional

SLUG_MAX_LENGTH = 60
HREF_MAX_LENGTH = 200
CONFIG_VALUE_MAX_LENGTH = 120
FALLBACK_HREF = "/produtos"

# Same whitelist for section config and item metadata.
CONFIG_KEYS = ("badgeLabel", "badgeColor", "highlighted", "tagline")

_SLUG_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASH_RUN = re.compile(r"-+")
_HREF_DISALLOWED = re.compile(r"[\s\"'<>`]")
_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def slugify(text: Optional[str]) -> str:
    """
    Lowercase ``text``, strip diacritics and keep only ``[a-z0-9-]``.

    Never raises. An empty result means the input had nothing usable and
    callers must treat it as invalid.
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    decomposed = unicodedata.normalize("NFD", text.lower())
    value = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    value = _SLUG_DISALLOWED.sub("", value)
    value = _WHITESPACE.sub("-", value.strip())
    value = _DASH_RUN.sub("-", value).strip("-")

    return value[:SLUG_MAX_LENGTH].rstrip("-")


def generate_section_id(explicit_id: Optional[str], title: str) -> str:
    # collision checks are the caller's job
    if explicit_id:
        return slugify(explicit_id)
    return slugify(title)


def is_valid_href(value: Any) -> bool:
    if not isinstance(value, str):
        return False

    trimmed = value.strip()
    if not trimmed:
        return False

    if trimmed.startswith("/"):
        # protocol-relative URLs leave the site
        return not trimmed.startswith(("//", "/\\"))

    return bool(_ABSOLUTE_URL.match(trimmed))


def sanitize_href(raw: Any) -> str:
    """
    Return ``raw`` as a same-site path or an http(s) URL, or ``/produtos``.

    Whitespace, quotes and angle brackets are removed and the result is
    capped at 200 characters, since CTA links are rendered unescaped.
    """
    if not isinstance(raw, str):
        return FALLBACK_HREF

    cleaned = _HREF_DISALLOWED.sub("", raw)
    if not is_valid_href(cleaned):
        return FALLBACK_HREF

    return cleaned[:HREF_MAX_LENGTH]


def sanitize_config_map(
    raw: Any,
    allowed_keys: Iterable[str] = CONFIG_KEYS,
) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        return {}

    sanitized: Dict[str, Any] = {}
    for key in allowed_keys:
        value = raw.get(key)
        if isinstance(value, bool):
            sanitized[key] = value
        elif isinstance(value, str):
            sanitized[key] = value[:CONFIG_VALUE_MAX_LENGTH]

    return sanitized
