"""Helpers for parsing whitespace-delimited command output."""

import re

# [[dd-]hh:]mm:ss[.fraction] as printed by ps etime/time columns
_DHMS = re.compile(r"^(?:(\d+)-)?(?:(\d+):)??(?:(\d+):)?(\d+)(?:\.\d+)?$")


def split_fields(line: str, count: int) -> list[str] | None:
    """
    Split a line into exactly ``count`` whitespace-separated fields.

    The split is limited so that the last field keeps whatever whitespace it
    contains (e.g. a full command line with arguments).

    Args:
        line: Raw text line.
        count: Number of fields expected.

    Returns:
        The fields, or None if the line does not have ``count`` fields.
    """
    fields = line.strip().split(None, count - 1)
    if len(fields) != count:
        return None
    return fields


def parse_int_or_default(text: str, default: int = 0) -> int:
    """Parse an integer, returning ``default`` if the text is not one."""
    try:
        return int(text.strip())
    except (AttributeError, ValueError):
        return default


def parse_dhms_or_default(text: str, default: int = 0) -> int:
    """
    Parse a ``[[dd-]hh:]mm:ss`` duration into whole seconds.

    A bare number is taken as seconds. Fractions of a second are dropped.
    """
    match = _DHMS.match(text.strip()) if text else None
    if match is None:
        return default
    days, hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    return ((days * 24 + hours) * 60 + minutes) * 60 + seconds
