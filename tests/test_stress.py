from unittest import mock

import pytest

from tinyunix.coreutils import TICK_SECONDS
from tinyunix.stress import (
    StressError,
    dorphan_main,
    forktest,
    forktest_main,
    forphan_main,
    logstress,
    logstress_main,
    stressfs,
    zombie_main,
)


def test_forktest_raises_when_every_fork_succeeds():
    with pytest.raises(StressError, match="fork claimed to work"):
        forktest(3)


def test_forktest_no_fork_possible():
    with mock.patch("os.fork", side_effect=OSError):
        assert forktest(10) == 0


def test_forktest_wait_stopped_early():
    with mock.patch("os.fork", side_effect=[4242, 4242, OSError()]):
        with pytest.raises(StressError, match="wait stopped early"):
            forktest(10)


def test_forktest_main_reports_ok(capsys):
    with mock.patch("os.fork", side_effect=OSError):
        assert forktest_main([]) == 0
    assert capsys.readouterr().out == "fork test\nfork test OK\n"


def test_stressfs_writes_five_files(tmp_path):
    paths = stressfs(str(tmp_path))
    assert sorted(p.rsplit("stressfs", 1)[1] for p in paths) == ["0", "1", "2", "3", "4"]
    for path in paths:
        with open(path, "rb") as handle:
            assert handle.read() == b"a" * (512 * 20)


def test_logstress_writes_each_file(tmp_path):
    first, second = tmp_path / "f1", tmp_path / "f2"
    logstress([first, second])
    assert first.read_bytes() == b"1" * (2000 * 250)
    assert second.read_bytes() == b"2" * (2000 * 250)


def test_logstress_reports_failed_writer(tmp_path):
    with pytest.raises(StressError) as info:
        logstress([tmp_path / "missing" / "f1"])
    assert info.value.status == 1


def test_logstress_main_without_files():
    assert logstress_main([]) == 0


def test_zombie_parent_pauses():
    with mock.patch("os.fork", return_value=1234), mock.patch("time.sleep") as sleep:
        assert zombie_main([]) == 0
    sleep.assert_called_once_with(5 * TICK_SECONDS)


def test_dorphan_fails_when_dd_exists(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "dd").mkdir()
    assert dorphan_main([]) == 1
    assert capsys.readouterr().out == "dorphan: mkdir dd failed\n"


def test_forphan_fails_when_file0_is_directory(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "file0").mkdir()
    assert forphan_main([]) == 1
    assert capsys.readouterr().out == "forphan: open failed\n"