import io
import sys

import pytest

from tinyunix.wc import Counts, count, main


def test_empty_input():
    assert count(b"") == Counts()


@pytest.mark.parametrize(
    "data",
    [b"hello world\n", b"  lead and trail  \n\n", b"tabs\tand\r\nreturns", b"one"],
)
def test_counts_match_invariants(data):
    counts = count(data)
    assert counts.chars == len(data)
    assert counts.lines == data.count(b"\n")
    assert counts.words == len(data.split())


def test_vertical_tab_separates_words():
    assert count(b"a\vb").words == 2


def test_chunks_count_like_whole_input():
    whole = b"hello world\nsecond line here\n"
    pieces = [whole[:3], whole[3:8], whole[8:20], whole[20:]]
    assert count(pieces) == count(whole)


def test_format():
    assert Counts(4, 5, 6).format("name") == "4 5 6 name\n"


def test_main_with_files(tmp_path, capsys):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.write_bytes(b"a b c\nd\n")
    second.write_bytes(b"")
    assert main([str(first), str(second)]) == 0
    out = capsys.readouterr().out
    assert out == count(first.read_bytes()).format(str(first)) + Counts().format(str(second))


def test_main_stdin_uses_empty_name(monkeypatch, capsys):
    data = b"x y\n"
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    assert main([]) == 0
    assert capsys.readouterr().out == count(data).format("")


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "missing"
    assert main([str(missing)]) == 1
    assert f"wc: cannot open {missing}" in capsys.readouterr().out