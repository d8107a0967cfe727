"""A first-fit free-list allocator over a simulated growable heap."""

UNIT = 16  # bytes in one block header, the allocation granule
MIN_GROWTH = 4096  # fewest units requested from the heap at a time


class Arena:
    """A heap that grows upward from ``start``, at most ``limit`` bytes.

    Addresses are plain integers; ``malloc`` returns the address just past
    a block's header, as the caller would see it.
    """

    def __init__(self, start=0x1000, limit=None):
        if start < 0:
            raise ValueError("heap start must not be negative")
        self.start = start
        self.limit = limit
        self.brk = start
        self._base = -UNIT  # sentinel header that sits below the heap
        self._next = {}
        self._size = {}
        self._allocated = set()
        self._freep = None

    def _sbrk(self, nbytes):
        if self.limit is not None and self.brk + nbytes > self.start + self.limit:
            return None
        old = self.brk
        self.brk += nbytes
        return old

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_GROWTH)
        hp = self._sbrk(nunits * UNIT)
        if hp is None:
            return None
        self._size[hp] = nunits
        self._allocated.add(hp)
        self.free(hp + UNIT)
        return self._freep

    def malloc(self, nbytes):
        """Allocate ``nbytes``; return the block's address or None when full."""
        if nbytes < 0:
            raise ValueError("cannot allocate a negative size")
        nunits = (nbytes + UNIT - 1) // UNIT + 1
        if self._freep is None:
            self._next[self._base] = self._base
            self._size[self._base] = 0
            self._freep = self._base
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next.pop(p)
                else:
                    self._size[p] -= nunits
                    p += self._size[p] * UNIT
                    self._size[p] = nunits
                self._allocated.add(p)
                self._freep = prevp
                return p + UNIT
            if p == self._freep:
                p = self._morecore(nunits)
                if p is None:
                    return None
            prevp, p = p, self._next[p]

    def free(self, addr):
        """Return a block from ``malloc`` to the free list, merging neighbours.

        Raises ValueError for an address that is not an allocated block.
        """
        if addr is None:
            raise ValueError("cannot free a null address")
        bp = addr - UNIT
        if bp not in self._allocated:
            raise ValueError(f"{addr:#x} is not an allocated block")
        self._allocated.discard(bp)

        nxt, size = self._next, self._size
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]

        q = nxt[p]
        if bp + size[bp] * UNIT == q:
            size[bp] += size.pop(q)
            nxt[bp] = nxt.pop(q)
        else:
            nxt[bp] = q
        if p + size[p] * UNIT == bp:
            size[p] += size.pop(bp)
            nxt[p] = nxt.pop(bp)
        else:
            nxt[p] = bp
        self._freep = p

    def free_blocks(self):
        """List the free blocks as (header address, size in bytes), by address."""
        if self._freep is None:
            return []
        blocks = []
        p = self._next[self._base]
        while p != self._base:
            blocks.append((p, self._size[p] * UNIT))
            p = self._next[p]
        return blocks