import contextlib
import logging
import os
from collections.abc import Iterable

from . import config, diagnostics as diag, ini
from .encoding import detect_encoding
from .files import confirm_encoding, iter_lines, write_atomically
from .formatting import format_entry

logger = logging.getLogger(__name__)

LINE_BREAKS = ("\n", "\r")


class Rewriter:
    """A line-at-a-time rewriter that sets a single key in a section.

    Every line is kept verbatim except the entry being replaced.
    Sections and keys are matched case-insensitively, but only the first section
    with a matching name is ever touched.

    Attributes:
        section: The target section, stripped the same way section headers are read.
        key: The target key, stripped the same way keys are read.
        value: The value to write.
        quote: The quoting option passed to formatting.format_value().
        diagnostics: Where malformed lines are reported.
        lines: The output lines so far.
        current_matched: Whether or not the section being read is the target.
        target_found: Whether or not the target section has been seen.
        key_matched: Whether or not the key has been written in the target section.
    """

    section: str
    key: str
    value: str
    quote: bool | None
    diagnostics: diag.Diagnostics
    lines: list[str]
    current_matched: bool
    target_found: bool
    key_matched: bool

    def __init__(
        self,
        section: str,
        key: str,
        value: str,
        quote: bool | None = None,
        diagnostics: diag.Diagnostics | None = None,
    ):
        # Padding would not survive being read back, so it could never match.
        self.section = section.strip()
        self.key = key.strip()
        self.value = value
        self.quote = quote
        self.diagnostics = diag.ensure(diagnostics)

        self.lines = []
        self.current_matched = False
        self.target_found = False
        self.key_matched = False

        self._section = self.section.lower()
        self._key = self.key.lower()
        self._lineno = 0

    def entry(self, key: str) -> str:
        return format_entry(key, self.value, self.quote)

    def feed(self, line: str):
        self._lineno += 1

        match ini.classify(line):
            case ini.Section(name):
                self._leave_section()

                # Later sections with the same name are left alone.
                self.current_matched = (
                    not self.target_found and name.lower() == self._section
                )
                if self.current_matched:
                    self.target_found = True
                    self.key_matched = False

            case ini.Property(key) if self.current_matched and key.lower() == self._key:
                # Keep the key's original casing.
                line = self.entry(key)
                self.key_matched = True

            case ini.Malformed():
                self.diagnostics.warn(
                    diag.Kind.MALFORMED_LINE,
                    f"keeping malformed line: '{line}'",
                    line=line,
                    lineno=self._lineno,
                )

        self.lines.append(line)

    def close(self) -> list[str]:
        """Signal the end of input.

        Returns:
            The rewritten lines.
        """

        self._leave_section()

        if not self.target_found:
            if self.lines and self.lines[-1].strip():
                # Separate the new section from the last one.
                self.lines.append("")

            self.lines.append(f"[{self.section}]")
            self.lines.append(self.entry(self.key))
            self.target_found = True

        return self.lines

    def _leave_section(self):
        if self.current_matched and not self.key_matched:
            # Append the key to the end of the section.
            self.lines.append(self.entry(self.key))
            self.key_matched = True

        self.current_matched = False


def rewrite_lines(
    lines: Iterable[str],
    section: str,
    key: str,
    value: str,
    quote: bool | None = None,
    diagnostics: diag.Diagnostics | None = None,
) -> list[str]:
    """Set a key in a section of INI lines.

    Args:
        lines: The lines to rewrite, without line terminators.
        section: The section name, matched case-insensitively.
        key: The key, matched case-insensitively.
        value: The value to set.
        quote: See formatting.format_value().
        diagnostics: Where malformed lines are reported.

    Returns:
        The rewritten lines.
    """

    rewriter = Rewriter(section, key, value, quote, diagnostics)

    for line in lines:
        rewriter.feed(line)

    return rewriter.close()


def validate(section: str, key: str, value: str):
    """Check that a section, key and value can be written as single INI lines.

    Raises:
        ValueError: Any of them would produce an invalid line.
    """

    for name, text in (("section", section), ("key", key), ("value", value)):
        if any(c in text for c in LINE_BREAKS):
            raise ValueError(f"{name} must not contain line breaks: {text!r}")

    if not section.strip() or "]" in section:
        raise ValueError(f"invalid section name: {section!r}")

    if not key.strip() or "=" in key:
        raise ValueError(f"invalid key: {key!r}")

    if key.strip().startswith(ini.COMMENT_PREFIXES):
        raise ValueError(f"key would not be read back as a key: {key!r}")


async def set_value(
    path: str | os.PathLike,
    section: str,
    key: str,
    value: str,
    *,
    quote: bool | None = None,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
):
    """Set a key in a section of an INI file, in place.

    If the key does not exist, it is appended to the end of the section.
    Whitespace around the section and key is ignored, as it is when reading.
    If the section does not exist, it is appended to the end of the file.
    Everything else in the file is kept as is, and the file is written back
    in the encoding it was read in.

    Args:
        path: The INI file.
        section: The section name, matched case-insensitively.
        key: The key, matched case-insensitively.
        value: The value to set.
        quote: True to always quote the value, False to never quote it.
            If None, quoting is decided by formatting.needs_quotes().
        settings: Detection and writing settings. Defaults to config.DEFAULT.
        diagnostics: Where warnings are reported.

    Raises:
        ValueError: The section, key or value cannot be written as INI.
        OSError: The file could not be read or written. The file is left untouched.
        UnicodeDecodeError: The file could not be decoded. The file is left untouched.
    """

    validate(section, key, value)

    diagnostics = diag.ensure(diagnostics, os.fspath(path))

    encoding = await detect_encoding(path, settings=settings, diagnostics=diagnostics)
    rewriter = Rewriter(section, key, value, quote, diagnostics)

    try:
        encoding = await confirm_encoding(
            path, encoding, settings=settings, diagnostics=diagnostics
        )

        async with contextlib.aclosing(iter_lines(path, encoding)) as lines:
            async for line in lines:
                rewriter.feed(line)

        text = "\n".join(rewriter.close()) + "\n"

        # Write with the encoding the file was read in.
        await write_atomically(
            path, text, encoding, settings=settings, diagnostics=diagnostics
        )
    except (OSError, UnicodeError, LookupError) as e:
        logger.error("failed to set [%s] %s in %s: %s", section, key, os.fspath(path), e)
        raise
