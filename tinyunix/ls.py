"""List files and directory contents."""

import os
import stat
import sys
from enum import IntEnum

DIRSIZ = 14
_BUFSIZE = 512


class FileType(IntEnum):
    """Kinds of file reported in a listing."""

    DIR = 1
    FILE = 2
    DEVICE = 3


def _file_type(mode):
    if stat.S_ISDIR(mode):
        return FileType.DIR
    if stat.S_ISREG(mode):
        return FileType.FILE
    return FileType.DEVICE


def fmtname(path):
    """Return the last component of ``path``, blank-padded to DIRSIZ."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _entry(path, st):
    kind = _file_type(st.st_mode)
    return f"{fmtname(path)} {int(kind)} {st.st_ino} {st.st_size}\n"


def ls(path, out):
    """Write a listing of ``path`` to ``out``; problems go to stderr."""
    try:
        st = os.stat(path)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return

    if _file_type(st.st_mode) is not FileType.DIR:
        out.write(_entry(path, st))
        return

    try:
        with os.scandir(path) as entries:
            names = sorted(entry.name for entry in entries)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return

    if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
        out.write("ls: path too long\n")
        return

    for name in [".", "..", *names]:
        full = f"{path}/{name}"
        try:
            entry_stat = os.stat(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        out.write(_entry(full, entry_stat))


def main(argv=None):
    """Run ls; return the exit status."""
    args = sys.argv[1:] if argv is None else argv
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())