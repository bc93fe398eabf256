import asyncio
import codecs
import logging
import os

import chardet

from . import config, diagnostics as diag

logger = logging.getLogger(__name__)

# Labels written with the native UTF-8 encoder.
# ASCII is a subset of UTF-8, so new non-ASCII values still round-trip.
NATIVE_ENCODINGS = frozenset(["utf-8", "utf8", "ascii"])

# The detector reports BOM-marked UTF-16/32 without a byte order, but the
# BOM must be written back in the order it was read in.
BOM_ORDERS = {
    "utf-16": [(codecs.BOM_UTF16_BE, "utf-16-be"), (codecs.BOM_UTF16_LE, "utf-16-le")],
    "utf-32": [(codecs.BOM_UTF32_BE, "utf-32-be"), (codecs.BOM_UTF32_LE, "utf-32-le")],
}

# Labels for BOM-marked files: (decoding, BOM, encoding).
SIG_ENCODINGS = {
    f"{base}-sig": (family, bom, base)
    for family, orders in BOM_ORDERS.items()
    for bom, base in orders
}


def normalize_encoding(label: str) -> str:
    """Normalize an encoding label as reported by the detector.

    Args:
        label: The encoding label, i.e. 'Windows-1252'.

    Returns:
        The lowercased label.
    """

    return label.strip().lower()


def decoding_for(encoding: str) -> str:
    """Return the codec to read a file with, given its detected encoding.

    Args:
        encoding: The detected encoding label.

    Returns:
        The codec name to pass to open().
    """

    label = normalize_encoding(encoding)

    # The detector only sees the start of the file, so pure ASCII there
    # says nothing about the rest. UTF-8 is a superset that also matches the writer.
    if label == "ascii":
        return "utf-8"

    # utf-16 and utf-32 consume the BOM in either byte order.
    if label in SIG_ENCODINGS:
        return SIG_ENCODINGS[label][0]

    return label


def _with_byte_order(label: str, sample: bytes) -> str:
    for bom, base in BOM_ORDERS.get(label, []):
        if sample.startswith(bom):
            return f"{base}-sig"

    return label


def detect_bytes(
    sample: bytes,
    *,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
) -> str:
    """Determine the encoding of some bytes.

    Args:
        sample: The bytes to sniff.
        settings: Detection settings. Defaults to config.DEFAULT.
        diagnostics: Where to report a fallback.

    Returns:
        The normalized encoding label, or the fallback encoding if detection failed.
    """

    settings = config.resolve(settings)

    detector = chardet.UniversalDetector()
    detector.feed(sample)
    result = detector.close()

    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0.0

    if not encoding or confidence < settings.min_confidence:
        diag.ensure(diagnostics).warn(
            diag.Kind.ENCODING_DETECTION,
            f"could not detect encoding (guess: {encoding}, confidence: {confidence:.2f}), "
            f"assuming {settings.fallback_encoding}",
        )
        return normalize_encoding(settings.fallback_encoding)

    logger.debug("detected %s with confidence %.2f", encoding, confidence)

    return _with_byte_order(normalize_encoding(encoding), sample)


def _read_sample(path: str | os.PathLike, size: int) -> bytes:
    with open(path, "rb") as f:
        return f.read(size)


async def detect_encoding(
    path: str | os.PathLike,
    *,
    settings: config.Settings | None = None,
    diagnostics: diag.Diagnostics | None = None,
) -> str:
    """Determine the encoding of a file by sampling its leading bytes.

    This never raises: if the file cannot be read, the fallback encoding is returned.

    Args:
        path: The file to detect the encoding of.
        settings: Detection settings. Defaults to config.DEFAULT.
        diagnostics: Where to report a fallback.

    Returns:
        The normalized encoding label.
    """

    settings = config.resolve(settings)

    try:
        sample = await asyncio.to_thread(_read_sample, path, settings.sample_size)
    except OSError as e:
        diag.ensure(diagnostics).warn(
            diag.Kind.ENCODING_DETECTION,
            f"could not read {os.fspath(path)} ({e}), assuming {settings.fallback_encoding}",
        )
        return normalize_encoding(settings.fallback_encoding)

    return detect_bytes(sample, settings=settings, diagnostics=diagnostics)


def encode_text(
    text: str, encoding: str, diagnostics: diag.Diagnostics | None = None
) -> bytes:
    """Encode text for writing back to disk.

    If the encoding is unknown or cannot represent the text, UTF-8 is used instead.

    Args:
        text: The text to encode.
        encoding: The encoding label, usually the one detected when the file was read.
        diagnostics: Where to report a fallback.

    Returns:
        The encoded text.
    """

    label = normalize_encoding(encoding)

    if label in NATIVE_ENCODINGS:
        return text.encode("utf-8")

    try:
        if label in SIG_ENCODINGS:
            _, bom, base = SIG_ENCODINGS[label]
            return bom + codecs.lookup(base).encode(text)[0]

        codec = codecs.lookup(label)
        return codec.encode(text)[0]
    except (LookupError, UnicodeEncodeError) as e:
        diag.ensure(diagnostics).warn(
            diag.Kind.ENCODING_WRITE,
            f"failed to encode as {encoding} ({e}), falling back to utf-8",
        )
        return text.encode("utf-8")
