import io

import pytest

from tinyunix.fmt import format, fprintf, printf


@pytest.mark.parametrize("value", [0, 7, -7, 42, 123456, -99999])
def test_decimal(value):
    assert format("%d", value) == str(value)


def test_decimal_wraps_to_32_bits():
    assert format("%d", 2**31) == format("%d", -(2**31))
    assert int(format("%d", -(2**31))) == -(2**31)


def test_long_decimal_keeps_sign():
    assert format("%ld", -5) == "-5"
    assert format("%lld", 12) == "12"


def test_unsigned_of_negative():
    assert int(format("%u", -1)) == 0xFFFFFFFF


@pytest.mark.parametrize("value", [0, 1, 255, 0xDEAD, 0x7FFFFFFF])
def test_hex_round_trip(value):
    text = format("%x", value)
    assert int(text, 16) == value
    assert text == text.upper()


def test_hex_digits_are_upper_case():
    assert format("%x", 255) == "FF"
    assert format("%lx", 255) == format("%x", 255)


def test_pointer_has_sixteen_digits():
    assert format("%p", 0) == "0x" + "0" * 16
    text = format("%p", 0xABC)
    assert len(text) == 18
    assert int(text, 16) == 0xABC


def test_char_and_string():
    assert format("%c%s", ord("A"), "bc") == "Abc"
    assert format("[%s]", None) == "[(null)]"


def test_percent_and_unknown_directive():
    assert format("100%%") == "100%"
    assert format("%q") == "%q"
    assert format("%lq") == "%lq"


def test_trailing_percent_is_dropped():
    assert format("abc%") == "abc"


def test_mixed_text():
    assert format("test %s: %d ok", "pipe1", 3) == "test pipe1: 3 ok"


def test_missing_argument_raises():
    with pytest.raises(TypeError):
        format("%d %d", 1)


def test_fprintf_writes_to_stream():
    out = io.StringIO()
    fprintf(out, "%s=%d\n", "n", 4)
    assert out.getvalue() == "n=4\n"


def test_printf_writes_to_stdout(capsys):
    printf("hello %s\n", "world")
    assert capsys.readouterr().out == "hello world\n"