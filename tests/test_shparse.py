import pytest

from tinyunix.layout import OpenFlag
from tinyunix.shparse import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse,
)

TRUNC_WRITE = OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC


def test_simple_command():
    assert parse("echo hi\n") == ExecCmd(["echo", "hi"])


def test_empty_line_gives_empty_exec():
    assert parse("") == ExecCmd([])
    assert parse("   \n") == ExecCmd([])


def test_pipe_is_right_associative():
    assert parse("a|b|c") == PipeCmd(ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"])))


def test_redirections_wrap_in_order():
    cmd = parse("cat < in > out\n")
    assert cmd == RedirCmd(
        RedirCmd(ExecCmd(["cat"]), "in", OpenFlag.RDONLY, 0),
        "out",
        TRUNC_WRITE,
        1,
    )


def test_word_stops_at_symbol():
    assert parse("echo>out") == RedirCmd(ExecCmd(["echo"]), "out", TRUNC_WRITE, 1)


def test_append_redirection_does_not_truncate():
    cmd = parse("echo x >> log")
    assert cmd.mode == OpenFlag.WRONLY | OpenFlag.CREATE
    assert not cmd.mode & OpenFlag.TRUNC
    assert cmd.fd == 1
    assert cmd.cmd == ExecCmd(["echo", "x"])


def test_list_and_background():
    assert parse("a; b") == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))
    assert parse("a &") == BackCmd(ExecCmd(["a"]))
    assert parse("a & ; b") == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_block_with_redirection():
    cmd = parse("(a; b) > out")
    assert cmd == RedirCmd(ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "out", TRUNC_WRITE, 1)


def test_leftovers_are_reported():
    with pytest.raises(ShellSyntaxError) as info:
        parse("a & b")
    assert str(info.value) == "syntax"
    assert info.value.leftovers == "b"


def test_stray_parenthesis_is_a_syntax_error():
    with pytest.raises(ShellSyntaxError, match="^syntax$"):
        parse("a (b)")


def test_missing_close_parenthesis():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse("(a")


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse("cat <")


def test_argument_limit():
    nine = " ".join("abcdefghi")
    assert parse(nine) == ExecCmd(list("abcdefghi"))
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse(nine + " j")