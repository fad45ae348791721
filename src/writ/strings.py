"""String helpers: ASCII whitespace trimming, placeholders, number formatting."""

from __future__ import annotations

# Only these count as whitespace when trimming arguments and output
ASCII_WHITESPACE = " \n\t\r"


def strip_ascii(text: str) -> str:
    """Strip leading and trailing ASCII whitespace (space, \\n, \\t, \\r)."""
    return text.strip(ASCII_WHITESPACE)


def scan_placeholders(body: str) -> list[str]:
    """Return the parameter names referenced as $name in body, in order.

    A name is the maximal run of letters, digits, '_' and '-' following a
    '$'. Duplicates are kept out; a bare '$' contributes nothing.

    >>> scan_placeholders("<a href='$url'>$text</a> $url")
    ['url', 'text']
    """
    names: list[str] = []
    for chunk in body.split("$")[1:]:
        end = 0
        while end < len(chunk) and (chunk[end].isalnum() or chunk[end] in "_-"):
            end += 1
        name = chunk[:end]
        if name and name not in names:
            names.append(name)
    return names


def substitute(text: str, name: str, value: str) -> str:
    """Replace every literal $name in text with value."""
    return text.replace(f"${name}", value)


def format_number(value: float) -> str:
    """Format a number the way it reads in source: 10 -> '10', 2.5 -> '2.5'."""
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    return text
