"""
Shared validation and normalization functions for Pydantic schemas.

Tags are compared case-insensitively by linkding clients, so every tag that
enters the system goes through normalize_tags() first - request bodies, query
filters and imported records alike.
"""
import re
import string
from collections.abc import Iterable
from datetime import UTC, datetime

# Tag strings arriving as a single value are split on commas and whitespace
TAG_SEPARATOR_PATTERN = re.compile(r"[,\s]+")

# ASCII-only lower-casing; non-ASCII letters keep their case
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

TRUE_VALUES = frozenset({"yes", "true", "1", "on"})
FALSE_VALUES = frozenset({"no", "false", "0", "off"})


def normalize_tag(tag: object) -> str:
    """
    Canonicalize a single tag.

    Returns:
        The trimmed, ASCII-lower-cased tag. Non-strings normalize to "".
    """
    if not isinstance(tag, str):
        return ""
    return tag.strip().translate(_ASCII_LOWER)


def normalize_tags(tags: Iterable[object]) -> list[str]:
    """
    Normalize a sequence of tags.

    Entries containing commas are split, since a comma-joined tag would come
    back as several tags from a Netscape export. Empty results and non-string
    entries are dropped, duplicates collapse, and the order of first
    occurrence is kept. Never raises.

    Args:
        tags: Raw tag values, normally one tag per entry.

    Returns:
        List of unique canonical tag names.
    """
    normalized = []
    seen: set[str] = set()
    for tag in tags:
        parts = tag.split(",") if isinstance(tag, str) else [tag]
        for part in parts:
            name = normalize_tag(part)
            if not name:
                continue  # Skip empty tags silently
            if name not in seen:
                seen.add(name)
                normalized.append(name)
    return normalized


def split_tag_string(value: str) -> list[str]:
    """Split a delimited tag string ("a, b c") into raw tag strings."""
    return [part for part in TAG_SEPARATOR_PATTERN.split(value) if part]


def coerce_tag_field(value: object) -> list[str]:
    """
    Turn a loosely typed tag field into normalized tag names.

    Accepts a delimited string (commas and whitespace) or a sequence of
    strings (entries split on commas only). Anything else is treated as
    "no tags".
    """
    if value is None:
        return []
    if isinstance(value, str):
        return normalize_tags(split_tag_string(value))
    if isinstance(value, (list, tuple, set, frozenset)):
        return normalize_tags(value)
    return []


def empty_if_none(value: object) -> object:
    """Map a null text field onto the empty string."""
    return "" if value is None else value


def coerce_text(value: object) -> str:
    """
    Turn a loosely typed text field into a string.

    Numbers are written out; null and every other type become "".
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def parse_tristate(value: str | None) -> bool | None:
    """Parse a yes/no style flag; unknown values mean "don't filter"."""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    return None


def coerce_flag(value: object, default: bool = False) -> bool:
    """Turn a loosely typed boolean field into a bool, using default when unsure."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (str, int)):
        parsed = parse_tristate(str(value))
        return default if parsed is None else parsed
    return default


def validate_url(url: str) -> str:
    """
    Validate that a URL is present.

    URLs are stored exactly as given (apart from surrounding whitespace) so
    clients find their bookmarks again by the URL they sent.

    Raises:
        ValueError: If the URL is empty.
    """
    trimmed = url.strip()
    if not trimmed:
        raise ValueError("URL cannot be empty")
    return trimmed


def parse_timestamp(value: object) -> datetime | None:
    """
    Parse a loosely formatted timestamp into an aware UTC datetime.

    Accepts datetimes, ISO 8601 strings (with or without offset, "Z" allowed)
    and epoch seconds. Naive values are taken to be UTC. Anything unparseable
    yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip().isdigit():
        return parse_timestamp(int(value.strip()))
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
