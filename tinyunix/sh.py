"""A command shell with pipes, lists, redirection and background jobs."""

import os
import subprocess
import sys
import threading
from dataclasses import astuple, dataclass, replace

from tinyunix.layout import OpenFlag
from tinyunix.shparse import BackCmd, ExecCmd, ListCmd, PipeCmd, RedirCmd, ShellSyntaxError, parse
from tinyunix.ulib import gets

_BUFSIZE = 100


@dataclass(frozen=True)
class _Streams:
    stdin: int = 0
    stdout: int = 1
    stderr: int = 2


class _FdReader:
    """Reads characters straight from a descriptor, without buffering ahead."""

    def __init__(self, fd):
        self.fd = fd

    def read(self, n):
        return os.read(self.fd, n).decode("latin-1")


def _say(fd, text):
    sys.stdout.flush()
    sys.stderr.flush()
    os.write(fd, text.encode("latin-1", "replace"))


def _os_flags(mode):
    mode = OpenFlag(mode)
    if mode & OpenFlag.RDWR:
        flags = os.O_RDWR
    elif mode & OpenFlag.WRONLY:
        flags = os.O_WRONLY
    else:
        flags = os.O_RDONLY
    for flag, host in (
        (OpenFlag.CREATE, os.O_CREAT),
        (OpenFlag.TRUNC, os.O_TRUNC),
        (OpenFlag.APPEND, os.O_APPEND),
    ):
        if mode & flag:
            flags |= host
    return flags


def _redirect(io, fd, target):
    if fd == 0:
        return replace(io, stdin=target)
    if fd == 1:
        return replace(io, stdout=target)
    return replace(io, stderr=target)


def _run_closing(cmd, io, fd):
    try:
        _run(cmd, io)
    finally:
        os.close(fd)


def _background(cmd, io):
    owned = _Streams(*(os.dup(fd) for fd in astuple(io)))

    def work():
        try:
            _run(cmd, owned)
        finally:
            for fd in astuple(owned):
                os.close(fd)

    threading.Thread(target=work, daemon=True).start()


def _run(cmd, io):
    if isinstance(cmd, ExecCmd):
        if not cmd.argv:
            return 1
        try:
            proc = subprocess.Popen(cmd.argv, stdin=io.stdin, stdout=io.stdout, stderr=io.stderr)
        except OSError:
            _say(io.stderr, f"exec {cmd.argv[0]} failed\n")
            return 0
        return proc.wait()

    if isinstance(cmd, RedirCmd):
        try:
            fd = os.open(cmd.file, _os_flags(cmd.mode), 0o666)
        except OSError:
            _say(io.stderr, f"open {cmd.file} failed\n")
            return 1
        try:
            return _run(cmd.cmd, _redirect(io, cmd.fd, fd))
        finally:
            os.close(fd)

    if isinstance(cmd, ListCmd):
        _run(cmd.left, io)
        return _run(cmd.right, io)

    if isinstance(cmd, PipeCmd):
        r, w = os.pipe()
        left = threading.Thread(target=_run_closing, args=(cmd.left, replace(io, stdout=w), w))
        left.start()
        try:
            _run(cmd.right, replace(io, stdin=r))
        finally:
            os.close(r)
        left.join()
        return 0

    if isinstance(cmd, BackCmd):
        _background(cmd.cmd, io)
        return 0

    raise TypeError(f"runcmd: not a command: {cmd!r}")


def runcmd(cmd):
    """Execute a command tree on the standard descriptors; return its status."""
    return _run(cmd, _Streams())


def run_line(line):
    """Run one line of input as the interactive shell would; return its status."""
    cmd = line.lstrip(" \t")
    if cmd.startswith("\n"):
        return 0
    if cmd.startswith("cd "):
        path = cmd[3:-1] if cmd.endswith(("\n", "\r")) else cmd[3:]
        try:
            os.chdir(path)
        except OSError:
            _say(2, f"cannot cd {path}\n")
            return 1
        return 0
    try:
        tree = parse(cmd)
    except ShellSyntaxError as exc:
        if exc.leftovers is not None:
            _say(2, f"leftovers: {exc.leftovers}\n")
        _say(2, f"{exc}\n")
        return 1
    return runcmd(tree)


def main(argv=None):
    """Read and run commands from standard input until end of input."""
    reader = _FdReader(0)
    while True:
        _say(2, "$ ")
        line = gets(reader, _BUFSIZE)
        if not line:
            break
        run_line(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())