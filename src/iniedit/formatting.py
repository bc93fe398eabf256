import re

RE_INTEGER = re.compile(r"[+-]?\d+")
RE_DECIMAL = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+)")
RE_BOOLEAN = re.compile(r"true|false", flags=re.IGNORECASE)

# Characters that could be mistaken for INI syntax if written bare.
SPECIAL_CHARS = frozenset(" \"'=[];#")


def needs_quotes(value: str) -> bool:
    """Check if a value should be quoted when quoting is left to auto-detection.

    Numbers and booleans are never quoted.
    Other values are quoted if they contain a space, a quote or INI syntax,
    or if they start or end with any whitespace (which is stripped on read).

    Args:
        value: The value to check.

    Returns:
        Whether or not the value should be quoted.
    """

    for regex in (RE_INTEGER, RE_DECIMAL, RE_BOOLEAN):
        if regex.fullmatch(value):
            return False

    if value != value.strip():
        return True

    return not SPECIAL_CHARS.isdisjoint(value)


def format_value(value: str, quote: bool | None = None) -> str:
    """Format a value as written on the right of the equals sign.

    Args:
        value: The value to format.
        quote: True to always quote the value, False to never quote it.
            If None, the value is quoted only if needs_quotes() says so.

    Returns:
        The formatted value.
    """

    if quote is None:
        quote = needs_quotes(value)

    return f'"{value}"' if quote else value


def format_entry(key: str, value: str, quote: bool | None = None) -> str:
    return f"{key}={format_value(value, quote)}"
