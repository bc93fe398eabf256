import dataclasses
import re
from collections.abc import Callable

COMMENT_PREFIXES = (";", "#")

RE_SECTION = re.compile(
    r"""
    # The whole (stripped) line must be a single bracketed token.
    ^ \[ (?P<section>[^\]]+) \] $
    """,
    flags=re.VERBOSE,
)

RE_PROPERTY = re.compile(
    r"""
    # The key is everything up to the first equals sign...
    ^ (?P<key>[^=]+) =
    # and the value is everything after it.
    (?P<value>.*) $
    """,
    flags=re.VERBOSE,
)


@dataclasses.dataclass(frozen=True, slots=True)
class Blank:
    """An empty or whitespace-only line."""


@dataclasses.dataclass(frozen=True, slots=True)
class Comment:
    """A comment, i.e. ; text or # text."""

    text: str


@dataclasses.dataclass(frozen=True, slots=True)
class Section:
    """An INI section, i.e. [name]."""

    name: str


@dataclasses.dataclass(frozen=True, slots=True)
class Property:
    """An INI property, i.e. key=value."""

    key: str
    value: str


@dataclasses.dataclass(frozen=True, slots=True)
class Malformed:
    """A line that is none of the above."""

    text: str


Line = Blank | Comment | Section | Property | Malformed

Rule = Callable[[str], Line | None]


def blank_rule(stripped: str) -> Blank | None:
    return Blank() if not stripped else None


def comment_rule(stripped: str) -> Comment | None:
    return Comment(stripped) if stripped.startswith(COMMENT_PREFIXES) else None


def section_rule(stripped: str) -> Section | None:
    if m := RE_SECTION.match(stripped):
        return Section(m["section"].strip())

    return None


def property_rule(stripped: str) -> Property | None:
    if m := RE_PROPERTY.match(stripped):
        return Property(key=m["key"].strip(), value=m["value"].strip())

    return None


# Evaluated in order; the first rule to match wins.
RULES: tuple[Rule, ...] = (blank_rule, comment_rule, section_rule, property_rule)


def classify(line: str) -> Line:
    """Classify a line of INI.

    Leading and trailing whitespace is ignored.

    Args:
        line: The line to classify, with or without its line terminator.

    Returns:
        The classification of the line. Lines that match no rule are malformed.
    """

    stripped = line.strip()

    for rule in RULES:
        if (result := rule(stripped)) is not None:
            return result

    return Malformed(line)


def strip_quotes(value: str) -> str:
    """Remove one layer of matching quotes around a value.

    Only double or single quotes are stripped, and only if both ends use the same one.

    Args:
        value: The value to unquote.

    Returns:
        The unquoted value, or the value as is if it is not quoted.
    """

    if len(value) >= 2 and value[0] in "\"'" and value[-1] == value[0]:
        return value[1:-1]

    return value
