import asyncio
import codecs
import logging
import os
from collections.abc import AsyncIterator

from . import config, diagnostics as diag
from .encoding import decoding_for, encode_text, normalize_encoding

logger = logging.getLogger(__name__)

# Number of bytes (roughly) read from disk per batch of lines.
READ_HINT = 64 * 1024


def _is_utf8(path: str | os.PathLike) -> bool:
    decoder = codecs.getincrementaldecoder("utf-8")()

    with open(path, "rb") as f:
        try:
            while chunk := f.read(READ_HINT):
                decoder.decode(chunk)
            decoder.decode(b"", final=True)
        except UnicodeDecodeError:
            return False

    return True


async def confirm_encoding(
    path: str | os.PathLike,
    encoding: str,
    *,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
) -> str:
    """Check a detected encoding against the whole file.

    Only the start of a file is sampled, so a file detected as ASCII may still
    have non-ASCII bytes further in. If those are not UTF-8, the file is assumed
    to be in the fallback encoding instead.

    Args:
        path: The file the encoding was detected for.
        encoding: The detected encoding label.
        settings: Supplies the fallback encoding. Defaults to config.DEFAULT.
        diagnostics: Where to report a fallback.

    Returns:
        The encoding to read and write the file with.

    Raises:
        OSError: The file could not be read.
    """

    if normalize_encoding(encoding) != "ascii":
        return encoding

    if await asyncio.to_thread(_is_utf8, path):
        return encoding

    fallback = config.resolve(settings).fallback_encoding
    diag.ensure(diagnostics).warn(
        diag.Kind.ENCODING_DETECTION,
        f"file is neither ASCII nor UTF-8 past the detected sample, assuming {fallback}",
    )

    return normalize_encoding(fallback)


async def iter_lines(path: str | os.PathLike, encoding: str) -> AsyncIterator[str]:
    """Stream the lines of a text file.

    The file is decoded strictly, and lines may end in LF, CRLF or CR.

    Args:
        path: The file to read.
        encoding: The encoding to decode the file with.

    Yields:
        Each line without its line terminator.

    Raises:
        OSError: The file could not be read.
        UnicodeDecodeError: The file is not valid in the encoding.
        LookupError: The encoding is unknown.
    """

    f = await asyncio.to_thread(open, path, encoding=decoding_for(encoding))

    try:
        while batch := await asyncio.to_thread(f.readlines, READ_HINT):
            for line in batch:
                yield line.removesuffix("\n")
    finally:
        await asyncio.to_thread(f.close)


async def file_exists(path: str | os.PathLike) -> bool:
    """Check if a path exists. This never raises.

    Args:
        path: The path to check.

    Returns:
        Whether or not the path exists.
    """

    try:
        return await asyncio.to_thread(os.path.exists, path)
    except (OSError, ValueError):
        return False


def temp_path(path: str | os.PathLike, settings: config.Settings | None = None) -> str:
    """Return the sibling path written to before being renamed onto path."""

    return os.fspath(path) + config.resolve(settings).temp_suffix


def _write_bytes(path: str, data: bytes):
    with open(path, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def _remove(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        # Don't mask the error that caused the cleanup.
        logger.error("failed to remove %s: %s", path, e)


async def write_atomically(
    path: str | os.PathLike,
    text: str,
    encoding: str,
    *,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
):
    """Replace a file's contents without ever exposing a partially written file.

    The encoded text is written to a sibling temporary file, which is then renamed onto path.

    Args:
        path: The file to write.
        text: The new contents.
        encoding: The encoding to write in. If the text cannot be encoded, UTF-8 is used.
        settings: Supplies the temporary file suffix. Defaults to config.DEFAULT.
        diagnostics: Where to report an encoding fallback.

    Raises:
        OSError: Writing or renaming failed. The temporary file is removed beforehand.
    """

    tmp = temp_path(path, settings)

    try:
        data = encode_text(text, encoding, diagnostics)
        await asyncio.to_thread(_write_bytes, tmp, data)
        await asyncio.to_thread(os.replace, tmp, path)
    except BaseException:
        logger.debug("removing %s after failed write", tmp)
        await asyncio.to_thread(_remove, tmp)
        raise

    logger.info("wrote %d bytes to %s (%s)", len(data), os.fspath(path), encoding)
