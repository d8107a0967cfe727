import io

import pytest

from tinyunix.ulib import atoi, gets


@pytest.mark.parametrize(
    "text, expected",
    [("12", 12), ("12abc", 12), ("007", 7), ("", 0), ("-5", 0), (" 3", 0), ("x9", 0)],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


def test_gets_reads_line_by_line():
    stream = io.StringIO("hello\nworld")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world"
    assert gets(stream, 100) == ""


def test_gets_stops_at_carriage_return():
    stream = io.StringIO("ab\rcd\n")
    assert gets(stream, 100) == "ab\r"
    assert gets(stream, 100) == "cd\n"


def test_gets_respects_limit():
    stream = io.StringIO("abcdef")
    assert gets(stream, 4) == "abc"
    assert gets(stream, 4) == "def"


def test_gets_with_tiny_limit_reads_nothing():
    stream = io.StringIO("abc")
    assert gets(stream, 1) == ""
    assert stream.read() == "abc"


def test_gets_on_binary_stream():
    stream = io.BytesIO(b"ls -l\nrest")
    assert gets(stream, 100) == b"ls -l\n"
    assert gets(stream, 100) == b"rest"
    assert gets(stream, 100) == b""