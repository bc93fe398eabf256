import contextlib
import io
import logging
import os
from collections.abc import Callable, Iterable

from . import config, diagnostics as diag, ini
from .encoding import detect_encoding
from .files import confirm_encoding, iter_lines

logger = logging.getLogger(__name__)

Entries = dict[str, str]
Record = tuple[str, Entries]
Callback = Callable[[str, Entries], None]


class SectionParser:
    """A line-at-a-time section parser.

    Lines are fed in one by one, and the callback is called with each section
    (name, entries) once the next section header or the end of input is reached.
    Entry keys are lowercased; section names keep their casing.

    Attributes:
        on_section: The callback.
        diagnostics: Where malformed lines and global keys are reported.
        section: The name of the section being read, or None before the first header.
        entries: The entries read so far in the current section.
        lineno: The number of lines fed so far.
    """

    on_section: Callback
    diagnostics: diag.Diagnostics
    section: str | None
    entries: Entries
    lineno: int

    def __init__(self, on_section: Callback, diagnostics: diag.Diagnostics | None = None):
        self.on_section = on_section
        self.diagnostics = diag.ensure(diagnostics)

        self.section = None
        self.entries = {}
        self.lineno = 0

    def feed(self, line: str):
        self.lineno += 1
        line = line.rstrip("\r\n")

        match ini.classify(line):
            case ini.Blank() | ini.Comment():
                pass

            case ini.Section(name):
                self._emit()
                self.section = name
                self.entries = {}

            case ini.Property(key, value):
                if self.section is None:
                    self.diagnostics.warn(
                        diag.Kind.GLOBAL_KEY,
                        f"skipping global key '{key}' outside any section",
                        line=line,
                        lineno=self.lineno,
                    )
                else:
                    self.entries[key.lower()] = ini.strip_quotes(value)

            case ini.Malformed():
                self.diagnostics.warn(
                    diag.Kind.MALFORMED_LINE,
                    f"skipping malformed line: '{line}'",
                    line=line,
                    lineno=self.lineno,
                )

    def close(self):
        """Signal the end of input, emitting the last section if any."""

        self._emit()
        self.section = None
        self.entries = {}

    def _emit(self):
        if self.section is not None:
            self.on_section(self.section, self.entries)


def parse_lines(
    lines: Iterable[str],
    on_section: Callback,
    diagnostics: diag.Diagnostics | None = None,
):
    """Parse INI lines, calling on_section for each section in order.

    Args:
        lines: The lines to parse. Line terminators are ignored.
        on_section: Called with (name, entries) after each section has been fully read.
        diagnostics: Where malformed lines and global keys are reported.
    """

    parser = SectionParser(on_section, diagnostics)

    for line in lines:
        parser.feed(line)

    parser.close()


def loads(text: str, diagnostics: diag.Diagnostics | None = None) -> list[Record]:
    """Parse an INI text.

    Args:
        text: The text to parse.
        diagnostics: See parse_lines().

    Returns:
        The sections in file order as (name, entries) tuples.
        Duplicate sections are returned as is, not merged.
    """

    records: list[Record] = []

    with io.StringIO(text) as buf:
        parse_lines(buf, lambda name, entries: records.append((name, entries)), diagnostics)

    return records


async def parse_file(
    path: str | os.PathLike,
    on_section: Callback,
    *,
    encoding: str | None = None,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
):
    """Stream an INI file, calling on_section for each section in order.

    The callback is called synchronously, as soon as each section has been read.

    Args:
        path: The file to parse.
        on_section: Called with (name, entries) after each section has been fully read.
            Entry keys are lowercased and values have one layer of quotes stripped.
        encoding: The file's encoding. If None, the encoding is detected.
        settings: Detection settings. Defaults to config.DEFAULT.
        diagnostics: Where warnings are reported.

    Raises:
        OSError: The file could not be read.
        UnicodeDecodeError: The file could not be decoded.
    """

    diagnostics = diag.ensure(diagnostics, os.fspath(path))

    if encoding is None:
        encoding = await detect_encoding(path, settings=settings, diagnostics=diagnostics)
        encoding = await confirm_encoding(
            path, encoding, settings=settings, diagnostics=diagnostics
        )

    logger.debug("parsing %s as %s", os.fspath(path), encoding)

    parser = SectionParser(on_section, diagnostics)

    async with contextlib.aclosing(iter_lines(path, encoding)) as lines:
        async for line in lines:
            parser.feed(line)

    parser.close()


async def load_file(
    path: str | os.PathLike,
    *,
    encoding: str | None = None,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
) -> list[Record]:
    """Parse an INI file into a list of sections.

    Args:
        See parse_file().

    Returns:
        The sections in file order as (name, entries) tuples.
    """

    records: list[Record] = []

    await parse_file(
        path,
        lambda name, entries: records.append((name, entries)),
        encoding=encoding,
        settings=settings,
        diagnostics=diagnostics,
    )

    return records
