import pytest

from tinyunix.umalloc import MIN_GROWTH, UNIT, Arena


def test_new_arena_has_no_free_blocks():
    arena = Arena()
    assert arena.free_blocks() == []
    assert arena.brk == arena.start


def test_small_blocks_take_two_header_units():
    arena = Arena()
    a = arena.malloc(1)
    b = arena.malloc(1)
    assert UNIT == 16
    assert abs(a - b) % UNIT == 0
    assert abs(a - b) >= 2 * UNIT


def test_malloc_grows_heap_by_minimum():
    arena = Arena(start=0x1000)
    addr = arena.malloc(10)
    assert arena.brk - arena.start == MIN_GROWTH * UNIT
    assert (addr - arena.start) % UNIT == 0
    assert arena.start < addr < arena.brk


def test_blocks_do_not_overlap():
    arena = Arena()
    sizes = [1, 10, 100, 1000, 17, 0, 4096]
    spans = sorted((arena.malloc(n), n) for n in sizes)
    for (a, n), (b, _) in zip(spans, spans[1:]):
        assert a + n <= b - UNIT
    for addr, _ in spans:
        assert arena.start < addr < arena.brk


def test_free_everything_leaves_one_block():
    arena = Arena()
    addrs = [arena.malloc(n) for n in (5, 50, 500, 5000, 7)]
    for addr in addrs[::2] + addrs[1::2]:
        arena.free(addr)
    assert arena.free_blocks() == [(arena.start, arena.brk - arena.start)]


def test_freed_block_is_reused():
    arena = Arena()
    a = arena.malloc(100)
    arena.free(a)
    assert arena.malloc(100) == a


def test_limit_makes_malloc_fail():
    arena = Arena(limit=MIN_GROWTH * UNIT)
    assert arena.malloc(10) is not None
    assert arena.malloc(MIN_GROWTH * UNIT) is None


def test_allocate_all_free_and_allocate_again():
    arena = Arena(limit=1 << 20)
    blocks = []
    while (addr := arena.malloc(10001)) is not None:
        blocks.append(addr)
    assert blocks
    for addr in blocks:
        arena.free(addr)
    assert arena.malloc(1024 * 20) is not None


def test_free_rejects_bad_addresses():
    arena = Arena()
    a = arena.malloc(10)
    with pytest.raises(ValueError):
        arena.free(a + 1)
    with pytest.raises(ValueError):
        arena.free(None)
    arena.free(a)
    with pytest.raises(ValueError):
        arena.free(a)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Arena().malloc(-1)