import pytest

from iniedit import ini


def test_ini_section():
    cfg = ini.classify("[this is a section]")
    assert isinstance(cfg, ini.Section)
    assert cfg.name == "this is a section"


def test_ini_section_is_stripped():
    assert ini.classify("  [ Database ]  ") == ini.Section("Database")


def test_ini_property():
    cfg = ini.classify("こんにちは=konnichiwa")
    assert isinstance(cfg, ini.Property)
    assert cfg.key == "こんにちは"
    assert cfg.value == "konnichiwa"


def test_ini_property_with_spaces():
    cfg = ini.classify("key = value")
    assert isinstance(cfg, ini.Property)
    assert cfg.key == "key"
    assert cfg.value == "value"


def test_ini_property_splits_on_first_equals():
    assert ini.classify("url=a=b") == ini.Property("url", "a=b")


def test_ini_property_empty_value():
    assert ini.classify("key=") == ini.Property("key", "")


@pytest.mark.parametrize("line", ["", "   ", "\t"])
def test_ini_blank(line: str):
    assert ini.classify(line) == ini.Blank()


@pytest.mark.parametrize("line", ["; comment", "# comment", "  ;key=value", "#[section]"])
def test_ini_comment(line: str):
    assert isinstance(ini.classify(line), ini.Comment)


def test_ini_invalid():
    assert isinstance(ini.classify("[hanging bracket"), ini.Malformed)
    assert isinstance(ini.classify("=empty property key"), ini.Malformed)
    assert isinstance(ini.classify("just some words"), ini.Malformed)


def test_ini_malformed_keeps_line():
    assert ini.classify("  oops  ") == ini.Malformed("  oops  ")


def test_ini_section_with_trailing_text_is_a_property():
    # Not a single bracketed token, but it has an equals sign.
    assert ini.classify("[a]=b") == ini.Property("[a]", "b")


@pytest.mark.parametrize(
    "value, expected",
    [
        ('"value"', "value"),
        ("'value'", "value"),
        ("\"value'", "\"value'"),
        ('"value', '"value'),
        ('"', '"'),
        ('""', ""),
        ('""quoted""', '"quoted"'),
        ("plain", "plain"),
    ],
)
def test_strip_quotes(value: str, expected: str):
    assert ini.strip_quotes(value) == expected
