import codecs
import pathlib

import pytest

from iniedit import Diagnostics, Kind, Settings
from iniedit.encoding import (
    decoding_for,
    detect_bytes,
    detect_encoding,
    encode_text,
    normalize_encoding,
)

SYLLABLES = ["あいうえお", "かきくけこ", "さしすせそ", "たちつてと", "なにぬねの"]

LYRICS = "[歌詞]\n" + "\n".join(f"{n}=「{s}」" for n, s in enumerate(SYLLABLES * 4))


def test_normalize_encoding():
    assert normalize_encoding(" Windows-1252 ") == "windows-1252"
    assert normalize_encoding("SHIFT_JIS") == "shift_jis"


def test_detect_bytes_ascii():
    assert detect_bytes(b"[A]\nkey=value\n") == "ascii"


def test_detect_bytes_bom():
    assert detect_bytes(LYRICS.encode("utf_8_sig")) == "utf-8-sig"
    assert detect_bytes(codecs.BOM_UTF16_LE + LYRICS.encode("utf-16-le")) == "utf-16-le-sig"


def test_detect_bytes_bom_big_endian():
    assert detect_bytes(codecs.BOM_UTF16_BE + LYRICS.encode("utf-16-be")) == "utf-16-be-sig"


@pytest.mark.parametrize(
    "encoding, expected",
    [
        ("ascii", "utf-8"),
        ("utf-16-be-sig", "utf-16"),
        ("utf-32-le-sig", "utf-32"),
        ("Windows-1252", "windows-1252"),
    ],
)
def test_decoding_for(encoding: str, expected: str):
    assert decoding_for(encoding) == expected


def test_detect_bytes_utf8():
    assert detect_bytes(LYRICS.encode("utf-8")) == "utf-8"


def test_detect_bytes_empty_falls_back():
    diagnostics = Diagnostics()

    assert detect_bytes(b"", diagnostics=diagnostics) == "windows-1252"
    assert [d.kind for d in diagnostics] == [Kind.ENCODING_DETECTION]


def test_detect_bytes_low_confidence_falls_back():
    settings = Settings(min_confidence=1.0, fallback_encoding="Latin-1")
    assert detect_bytes(LYRICS.encode("shift_jis"), settings=settings) == "latin-1"


@pytest.mark.asyncio
async def test_detect_encoding_samples_prefix(tmp_path: pathlib.Path):
    path = tmp_path / "test.ini"
    # The non-ASCII tail is past the sample.
    path.write_bytes(b"[A]\nkey=value\n" + LYRICS.encode("utf_16_le"))

    assert await detect_encoding(path, settings=Settings(sample_size=14)) == "ascii"


@pytest.mark.asyncio
async def test_detect_encoding_missing_file(tmp_path: pathlib.Path):
    diagnostics = Diagnostics()

    encoding = await detect_encoding(tmp_path / "missing.ini", diagnostics=diagnostics)

    assert encoding == "windows-1252"
    assert diagnostics.of_kind(Kind.ENCODING_DETECTION)


@pytest.mark.asyncio
async def test_detect_encoding_directory(tmp_path: pathlib.Path):
    assert await detect_encoding(tmp_path) == "windows-1252"


@pytest.mark.parametrize(
    "encoding, text, expected",
    [
        ("utf-8", "café", "café".encode("utf-8")),
        ("ascii", "café", "café".encode("utf-8")),
        ("windows-1252", "café", "café".encode("cp1252")),
        ("shift_jis", "こんにちは", "こんにちは".encode("shift_jis")),
        ("utf-16-le", "é", b"\xe9\x00"),
        ("utf-16-be", "é", b"\x00\xe9"),
        ("utf-16-be-sig", "é", b"\xfe\xff\x00\xe9"),
        ("utf-16-le-sig", "é", b"\xff\xfe\xe9\x00"),
    ],
)
def test_encode_text(encoding: str, text: str, expected: bytes):
    assert encode_text(text, encoding) == expected


def test_encode_text_unencodable():
    diagnostics = Diagnostics()

    assert encode_text("日本", "windows-1252", diagnostics) == "日本".encode("utf-8")
    assert [d.kind for d in diagnostics] == [Kind.ENCODING_WRITE]


def test_encode_text_unknown_encoding():
    diagnostics = Diagnostics()

    assert encode_text("abc", "no-such-codec", diagnostics) == b"abc"
    assert [d.kind for d in diagnostics] == [Kind.ENCODING_WRITE]
