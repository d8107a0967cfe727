"""Memory layout, page-table arithmetic, open flags and system parameters."""

from enum import IntFlag

# System parameters.
NPROC = 64
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGBLOCKS = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 2000
MAXPATH = 128
USERSTACK = 1

# Paging.
PGSIZE = 4096
PGSHIFT = 12
PXMASK = 0x1FF
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)
SATP_SV39 = 8 << 60

# Machine and supervisor status bits.
MSTATUS_MPP_MASK = 3 << 11
MSTATUS_MPP_M = 3 << 11
MSTATUS_MPP_S = 1 << 11
MSTATUS_MPP_U = 0 << 11
SSTATUS_SPP = 1 << 8
SSTATUS_SPIE = 1 << 5
SSTATUS_UPIE = 1 << 4
SSTATUS_SIE = 1 << 1
SSTATUS_UIE = 1 << 0
SIE_SEIE = 1 << 9
SIE_STIE = 1 << 5
MIE_STIE = 1 << 5

# Physical memory layout.
UART0 = 0x10000000
UART0_IRQ = 10
VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1
PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000
KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

# Virtual memory layout.
TRAMPOLINE = MAXVA - PGSIZE
TRAPFRAME = TRAMPOLINE - PGSIZE


class OpenFlag(IntFlag):
    """Flags accepted by open()."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    APPEND = 0x004
    CREATE = 0x200
    TRUNC = 0x400


class PteFlag(IntFlag):
    """Permission and status bits of a page-table entry."""

    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4


def pgroundup(sz):
    """Round a size up to the next page boundary."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1)


def pgrounddown(a):
    """Round an address down to the start of its page."""
    return a & ~(PGSIZE - 1)


def pa2pte(pa):
    """Shift a physical address into the position it takes in a PTE."""
    return (pa >> 12) << 10


def pte2pa(pte):
    """Extract the physical address held in a PTE."""
    return (pte >> 10) << 12


def pte_flags(pte):
    """Return the low ten flag bits of a PTE."""
    return pte & 0x3FF


def _pxshift(level):
    return PGSHIFT + 9 * level


def px(level, va):
    """Return the 9-bit page-table index of ``va`` at ``level`` (0 to 2)."""
    if level not in (0, 1, 2):
        raise ValueError(f"page-table level must be 0, 1 or 2, not {level}")
    return (va >> _pxshift(level)) & PXMASK


def make_satp(pagetable):
    """Build a satp value selecting Sv39 with the given root page table."""
    return SATP_SV39 | (pagetable >> 12)


def kstack(p):
    """Virtual address of the kernel stack of process slot ``p``."""
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE


def plic_senable(hart):
    """Supervisor interrupt-enable register of ``hart``."""
    return PLIC + 0x2080 + hart * 0x100


def plic_spriority(hart):
    """Supervisor priority-threshold register of ``hart``."""
    return PLIC + 0x201000 + hart * 0x2000


def plic_sclaim(hart):
    """Supervisor claim/complete register of ``hart``."""
    return PLIC + 0x201004 + hart * 0x2000