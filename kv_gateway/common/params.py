"""
Query Parameter Parsing

Shared parsing for optional integer query parameters. Callers decide what a
failed parse means: the listing limit falls back to a default, the TTL rejects
the request.
"""

from typing import Optional

# Largest TTL accepted, in seconds (unsigned 64-bit)
MAX_TTL_SECONDS = 2**64 - 1


def parse_positive_int(
    raw: Optional[str], maximum: Optional[int] = None
) -> Optional[int]:
    """
    Parse a positive base-10 integer.

    Args:
        raw: Raw query string value, or None when the parameter is absent
        maximum: Largest accepted value, unbounded when None

    Returns:
        The parsed integer, or None when absent, unparsable, zero, negative
        or above `maximum`

    Example:
        >>> parse_positive_int("25")
        25
        >>> parse_positive_int("-5") is None
        True
    """
    if raw is None:
        return None
    # One leading "+" is allowed; whitespace is not
    text = raw[1:] if raw.startswith("+") else raw
    # int() accepts "1_000", padding and non-ASCII digits; a query parameter should not
    if not text.isascii() or not text.isdigit():
        return None
    try:
        value = int(text)
    except ValueError:
        # Longer than the interpreter's int string conversion limit
        return None
    if value <= 0:
        return None
    if maximum is not None and value > maximum:
        return None
    return value


def resolve_list_limit(raw: Optional[str], default: int, maximum: int) -> int:
    """
    Resolve the listing limit, falling back to `default` on any bad input.

    The result is clamped to `maximum`.
    """
    limit = parse_positive_int(raw)
    if limit is None:
        return default
    return min(limit, maximum)
