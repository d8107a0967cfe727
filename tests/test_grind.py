from collections import Counter

import pytest

from tinyunix.grind import ParkMiller, go


class _Script:
    """A generator stand-in that yields fixed values."""

    def __init__(self, values):
        self._values = iter(values)

    def next(self):
        return next(self._values)


def _run(values):
    return go(0, _Script(values), len(values))


def test_park_miller_first_value_from_seed_one():
    assert ParkMiller(1).next() == 33613


def test_park_miller_range_and_state():
    for seed in (0, 1, 31, 7177, 2**40 + 5):
        rng = ParkMiller(seed)
        for _ in range(200):
            value = rng.next()
            assert 0 <= value <= 0x7FFFFFFD
            assert rng.state == value


def test_park_miller_is_deterministic():
    a, b = ParkMiller(1 ^ 31), ParkMiller(1 ^ 31)
    assert [a.next() for _ in range(50)] == [b.next() for _ in range(50)]


def test_go_counts_follow_generator(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    reference = ParkMiller(7)
    expected = Counter(reference.next() % 23 for _ in range(40))
    counts = go(0, ParkMiller(7), 40)
    assert counts == expected
    assert sum(counts.values()) == 40
    assert (tmp_path / "grindir").is_dir()
    assert not (tmp_path / "c").exists()


def test_go_zero_iterations_creates_grindir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert go(1, ParkMiller(), 0) == Counter()
    assert (tmp_path / "grindir").is_dir()


def test_go_fails_when_grindir_is_a_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "grindir").write_bytes(b"")
    with pytest.raises(RuntimeError, match="chdir grindir failed"):
        go(0, ParkMiller(), 5)


def test_create_then_unlink(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([1]) == Counter({1: 1})
    assert (tmp_path / "a").is_file()
    assert _run([3]) == Counter({3: 1})
    assert not (tmp_path / "a").exists()


def test_unlink_b_from_grindir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([2]) == Counter({2: 1})
    assert (tmp_path / "b").is_file()
    assert _run([4]) == Counter({4: 1})
    assert not (tmp_path / "b").exists()


def test_directory_a_left_empty(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([9]) == Counter({9: 1})
    assert (tmp_path / "a").is_dir()
    assert list((tmp_path / "a").iterdir()) == []


def test_dotdot_at_root_stays_at_root(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([10]) == Counter({10: 1})
    assert (tmp_path / "b").is_dir()
    assert list((tmp_path / "b").iterdir()) == []


def test_link_b_to_a(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([2, 12]) == Counter({2: 1, 12: 1})
    assert (tmp_path / "a").stat().st_ino == (tmp_path / "b").stat().st_ino


def test_write_through_open_descriptor(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    counts = _run([5, 7, 8])
    assert counts == Counter({5: 1, 7: 1, 8: 1})
    assert (tmp_path / "a").stat().st_size == 999


def test_orphaned_directory_is_gone(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([1, 20]) == Counter({1: 1, 20: 1})
    assert not (tmp_path / "a").exists()
    assert not (tmp_path / "x").exists()


def test_fresh_file_check_cleans_up(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([21]) == Counter({21: 1})
    assert not (tmp_path / "c").exists()


def test_process_actions(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([13, 14, 18, 19, 15, 16]) == Counter(
        {13: 1, 14: 1, 18: 1, 19: 1, 15: 1, 16: 1}
    )


def test_pipeline_echo_into_cat(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run([22]) == Counter({22: 1})