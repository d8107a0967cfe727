"""A minimal shell: cd and exit built in, one pipe, < and >, & jobs, and scripts."""

import os
import re
import subprocess
import sys
from dataclasses import dataclass

from tinyunix.fmt import format as _format

MAXARGS = 16
MAXLINE = 256

_BLANKS = re.compile(r"[ \t]+")
_jobs = []


@dataclass
class Command:
    """A parsed command line."""

    argv: list
    infile: "str | None" = None
    outfile: "str | None" = None
    background: bool = False
    pipe_to: "list | None" = None


class _FdReader:
    """Reads characters straight from a descriptor, without buffering ahead."""

    def __init__(self, fd):
        self.fd = fd

    def read(self, n):
        return os.read(self.fd, n).decode("latin-1")


def split(line, max_args=MAXARGS):
    """Split on spaces and tabs, keeping at most ``max_args - 1`` words."""
    words = [word for word in _BLANKS.split(line) if word]
    return words[:max(max_args - 1, 0)]


def parse_command(line):
    """Parse a line into a Command, or return None if it holds no words."""
    argv = split(line, MAXARGS)
    if not argv:
        return None
    background = argv[-1] == "&"
    if background:
        argv = argv[:-1]

    if "|" in argv:
        pos = argv.index("|")
        return Command(argv[:pos], background=background, pipe_to=argv[pos + 1:])

    for i, word in enumerate(argv):
        if word in ("<", ">") and i + 1 < len(argv):
            command = Command(argv[:i], background=background)
            if word == "<":
                command.infile = argv[i + 1]
            else:
                command.outfile = argv[i + 1]
            return command
    return Command(argv, background=background)


def _write(fd, text):
    sys.stdout.flush()
    os.write(fd, text.encode("latin-1", "replace"))


def _spawn(argv, stdin, stdout):
    if argv:
        try:
            return subprocess.Popen(argv, stdin=stdin, stdout=stdout)
        except OSError:
            pass
    _write(stdout, _format("exec %s failed\n", argv[0] if argv else None))
    return None


def _run_pipeline(left_argv, right_argv):
    r, w = os.pipe()
    try:
        left = _spawn(left_argv, 0, w)
        right = _spawn(right_argv, r, 1)
    finally:
        os.close(r)
        os.close(w)
    statuses = [proc.wait() if proc is not None else 1 for proc in (left, right)]
    return statuses[-1]


def _run_single(command):
    stdin, stdout, opened = 0, 1, []
    try:
        if command.infile is not None:
            try:
                stdin = os.open(command.infile, os.O_RDONLY)
            except OSError:
                _write(1, f"open {command.infile} failed\n")
                return 1
            opened.append(stdin)
        if command.outfile is not None:
            try:
                stdout = os.open(command.outfile, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o666)
            except OSError:
                _write(1, f"open {command.outfile} failed\n")
                return 1
            opened.append(stdout)
        proc = _spawn(command.argv, stdin, stdout)
    finally:
        for fd in opened:
            os.close(fd)

    if proc is None:
        return 1
    if command.background:
        _jobs[:] = [job for job in _jobs if job.poll() is None]
        _jobs.append(proc)
        return 0
    return proc.wait()


def run_command(line):
    """Run one line; return its status. ``exit`` raises SystemExit(0)."""
    argv = split(line, MAXARGS)
    if not argv:
        return 0
    if argv[0] == "exit":
        raise SystemExit(0)
    if argv[0] == "cd":
        if len(argv) < 2:
            sys.stdout.write("cd: missing path\n")
            return 1
        try:
            os.chdir(argv[1])
        except OSError:
            sys.stdout.write(f"cd: cannot cd {argv[1]}\n")
            return 1
        return 0

    command = parse_command(line)
    if command.pipe_to is not None:
        return _run_pipeline(command.argv, command.pipe_to)
    return _run_single(command)


def _readline(stream, n):
    chars = []
    while len(chars) + 1 < n:
        c = stream.read(1)
        if not c or c in "\r\n":
            break
        chars.append(c)
    return "".join(chars)


def repl(stream, interactive):
    """Run lines from ``stream`` until end of input or an empty line."""
    while True:
        if interactive:
            sys.stdout.write("$ ")
            sys.stdout.flush()
        line = _readline(stream, MAXLINE)
        if not line:
            break
        run_command(line)


def main(argv=None):
    """Run a script given as the only argument, or read commands interactively."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if len(args) == 1:
            try:
                handle = open(args[0], encoding="latin-1", newline="")
            except OSError:
                sys.stdout.write(f"cannot open {args[0]}\n")
                return 1
            with handle:
                repl(handle, False)
        else:
            repl(_FdReader(0), True)
    except SystemExit as exc:
        return exc.code or 0
    return 0


if __name__ == "__main__":
    sys.exit(main())