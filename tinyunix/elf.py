"""Reading and writing ELF64 file and program headers."""

import struct
from dataclasses import dataclass, field
from enum import IntFlag
from typing import ClassVar

ELF_MAGIC = 0x464C457F
ELF_PROG_LOAD = 1


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a well-formed ELF header."""


class ProgFlag(IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


@dataclass
class ElfHeader:
    """The ELF file header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")
    SIZE: ClassVar[int] = FORMAT.size

    magic: int = ELF_MAGIC
    elf: bytes = field(default=bytes(12))
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    @classmethod
    def from_bytes(cls, data):
        """Decode a header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(f"ELF header needs {cls.SIZE} bytes, got {len(data)}")
        header = cls(*cls.FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header

    def to_bytes(self):
        """Encode the header in little-endian byte order."""
        return self.FORMAT.pack(
            self.magic, self.elf, self.type, self.machine, self.version,
            self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
            self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
        )


@dataclass
class ProgramHeader:
    """An ELF program (segment) header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")
    SIZE: ClassVar[int] = FORMAT.size

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @classmethod
    def from_bytes(cls, data):
        """Decode a program header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(f"program header needs {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls.FORMAT.unpack_from(data))

    def to_bytes(self):
        """Encode the program header in little-endian byte order."""
        return self.FORMAT.pack(
            self.type, int(self.flags), self.off, self.vaddr,
            self.paddr, self.filesz, self.memsz, self.align,
        )

    def is_loadable(self):
        """True if this segment is to be loaded into memory."""
        return self.type == ELF_PROG_LOAD


def program_headers(data, header):
    """Return the program headers of an image whose file header is ``header``."""
    headers = []
    for i in range(header.phnum):
        start = header.phoff + i * ProgramHeader.SIZE
        chunk = data[start:start + ProgramHeader.SIZE]
        if len(chunk) < ProgramHeader.SIZE:
            raise ElfFormatError(f"program header {i} lies beyond the end of the image")
        headers.append(ProgramHeader.from_bytes(chunk))
    return headers