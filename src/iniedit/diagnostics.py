import dataclasses
import enum
import logging
from collections.abc import Iterator

logger = logging.getLogger(__name__)


class Kind(enum.Enum):
    """The kinds of non-fatal problems an operation can report."""

    MALFORMED_LINE = "malformed-line"
    GLOBAL_KEY = "global-key"
    ENCODING_DETECTION = "encoding-detection"
    ENCODING_WRITE = "encoding-write"


@dataclasses.dataclass(frozen=True, slots=True)
class Diagnostic:
    """A warning raised while reading or writing an INI file.

    Attributes:
        kind: What went wrong.
        message: A human-readable description.
        line: The offending line, if any.
        lineno: The 1-based line number of the offending line, if any.
        path: The file being processed, if any.
    """

    kind: Kind
    message: str
    line: str | None = None
    lineno: int | None = None
    path: str | None = None

    def __str__(self) -> str:
        location = ""
        if self.path is not None:
            location = self.path
        if self.lineno is not None:
            location += f":{self.lineno}"

        if location:
            return f"{location}: {self.message}"

        return self.message


class Diagnostics:
    """A collector for diagnostics.

    Every record is also logged as a warning, so passing a collector is only needed
    when the caller wants to inspect the warnings afterwards.

    Attributes:
        records: The collected diagnostics in the order they were reported.
        path: The file the collector is currently attached to.
    """

    records: list[Diagnostic]
    path: str | None

    def __init__(self, path: str | None = None):
        self.records = []
        self.path = path

    def warn(
        self,
        kind: Kind,
        message: str,
        *,
        line: str | None = None,
        lineno: int | None = None,
    ) -> Diagnostic:
        """Record a diagnostic.

        Args:
            kind: What went wrong.
            message: A human-readable description.
            line: The offending line.
            lineno: The line number of the offending line.

        Returns:
            The recorded diagnostic.
        """

        record = Diagnostic(kind, message, line=line, lineno=lineno, path=self.path)
        self.records.append(record)

        logger.warning("%s", record)

        return record

    def of_kind(self, kind: Kind) -> list[Diagnostic]:
        return [r for r in self.records if r.kind is kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


def ensure(diagnostics: Diagnostics | None, path: str | None = None) -> Diagnostics:
    """Return a usable collector, creating a throwaway one if needed.

    Args:
        diagnostics: The caller's collector or None.
        path: The file the diagnostics refer to.

    Returns:
        The collector.
    """

    if diagnostics is None:
        diagnostics = Diagnostics()

    if path is not None:
        diagnostics.path = path

    return diagnostics
