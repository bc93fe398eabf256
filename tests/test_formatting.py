import pytest

from iniedit.formatting import format_entry, format_value, needs_quotes


@pytest.mark.parametrize(
    "value, expected",
    [
        ("42", "42"),
        ("-7", "-7"),
        ("3.14", "3.14"),
        ("true", "true"),
        ("FALSE", "FALSE"),
        ("/usr/bin", "/usr/bin"),
        ("", ""),
        ("My App", '"My App"'),
        ("a=b", '"a=b"'),
        ("[x]", '"[x]"'),
        ("semi;colon", '"semi;colon"'),
        ("hash#tag", '"hash#tag"'),
        ("it's", "\"it's\""),
        ("\tindented", "\"\tindented\""),
        ("trailing\t", "\"trailing\t\""),
    ],
)
def test_format_value_auto(value: str, expected: str):
    assert format_value(value) == expected


def test_format_value_forced():
    assert format_value("42", quote=True) == '"42"'
    assert format_value("/usr/bin", quote=True) == '"/usr/bin"'


def test_format_value_forbidden():
    assert format_value("My App", quote=False) == "My App"


def test_needs_quotes():
    assert not needs_quotes("True")
    assert needs_quotes("1 2")


def test_format_entry():
    assert format_entry("Name", "My App") == 'Name="My App"'
    assert format_entry("Port", "8080") == "Port=8080"
    assert format_entry("Port", "8080", quote=True) == 'Port="8080"'
