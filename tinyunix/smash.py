"""An interactive shell with numbered history, pipelines, redirection and scripts."""

import os
import re
import subprocess
import sys
import time
from dataclasses import dataclass

from tinyunix.coreutils import TICK_SECONDS
from tinyunix.ulib import atoi, gets

MAX_HISTORY = 100
MAX_CMD_LEN = 128
MAX_ARGS = 16

_PATH_MAX = 128
_DELIMITERS = re.compile(r"[ \t\r\n]+")
_REDIRECT_MODES = {
    "<": os.O_RDONLY,
    ">": os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    ">>": os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}


@dataclass
class HistoryEntry:
    """One remembered command and how long it took."""

    cmd: str = ""
    duration_ms: int = 0


class History:
    """The last MAX_HISTORY commands, numbered from 1."""

    def __init__(self):
        self.entries = [HistoryEntry() for _ in range(MAX_HISTORY)]
        self.count = 1  # number the next command will get

    def _entry(self, number):
        return self.entries[(number - 1) % MAX_HISTORY]

    def add(self, cmd):
        """Record ``cmd`` under the next number and return its entry."""
        entry = HistoryEntry(cmd[:MAX_CMD_LEN - 1])
        self.entries[(self.count - 1) % MAX_HISTORY] = entry
        self.count += 1
        return entry

    def expand(self, line):
        """Expand ``!!``, ``!N`` or ``!prefix``; other lines come back unchanged.

        Raises LookupError when no remembered command fits.
        """
        if not line.startswith("!"):
            return line
        rest = line[1:]
        target = None
        if rest.startswith("!"):
            if self.count > 1:
                target = self._entry(self.count - 1).cmd
        elif rest and "0" <= rest[0] <= "9":
            number = atoi(rest)
            if 0 < number < self.count and number >= self.count - MAX_HISTORY:
                target = self._entry(number).cmd
        else:
            oldest = max(1, self.count - MAX_HISTORY)
            for number in range(self.count - 1, oldest - 1, -1):
                past = self._entry(number).cmd
                if past.startswith(rest):
                    target = past
                    break
        if target is None:
            raise LookupError("smash: event not found")
        return target

    def listing(self, show_time=False):
        """Render the remembered commands, oldest first."""
        start = max(1, self.count - MAX_HISTORY)
        lines = []
        for number in range(start, self.count):
            entry = self._entry(number)
            if show_time:
                lines.append(f"[{number}|{entry.duration_ms}ms] {entry.cmd}\n")
            else:
                lines.append(f"  {number} {entry.cmd}\n")
        return "".join(lines)


def strip_comment(line):
    """Drop everything from the first '#' on."""
    return line.split("#", 1)[0]


def tokenize(line, max_args=MAX_ARGS):
    """Split on blanks, keeping at most ``max_args - 1`` tokens."""
    tokens = [token for token in _DELIMITERS.split(line) if token]
    return tokens[:max(max_args - 1, 0)]


def split_pipeline(tokens):
    """Split a token list at each '|' into the commands of a pipeline."""
    segments = [[]]
    for token in tokens:
        if token == "|":
            segments.append([])
        else:
            segments[-1].append(token)
    return segments


def _parse_redirects(tokens):
    """Return (argv, [(operator, file), ...]) for one pipeline segment."""
    argv_end = None
    redirects = []
    for j, token in enumerate(tokens):
        if token in _REDIRECT_MODES:
            if j + 1 >= len(tokens):
                raise ValueError("syntax error")
            redirects.append((token, tokens[j + 1]))
            if argv_end is None:
                argv_end = j
    return tokens[:argv_end], redirects


def _start(cmd, args, stdin, stdout):
    """Start ``cmd`` with the given standard input and output descriptors."""
    if "/" in cmd:
        candidates = [cmd]
    else:
        candidates = [("/" + cmd)[:_PATH_MAX - 1], os.path.join(os.curdir, cmd)]
    if args:
        for path in candidates:
            try:
                return subprocess.Popen(list(args), executable=path, stdin=stdin, stdout=stdout)
            except OSError:
                continue
    raise OSError(f"exec: {cmd} failed")


def execvp(cmd, args):
    """Start ``cmd`` with ``args`` and return the process.

    A name holding '/' is run as given; otherwise it is looked for in the
    root directory and then in the current one. Raises OSError if none
    of these can be started.
    """
    return _start(cmd, args, None, None)


class _FdReader:
    """Reads characters straight from a descriptor, without buffering ahead."""

    def __init__(self, fd):
        self.fd = fd

    def read(self, n):
        return os.read(self.fd, n).decode("latin-1")


def _ticks():
    return int(time.monotonic() / TICK_SECONDS)


class Shell:
    """Shell state: history, last exit status and background jobs."""

    def __init__(self, script_mode=False):
        self.history = History()
        self.last_status = 0
        self.script_mode = script_mode
        self._jobs = []

    def prompt(self):
        """The interactive prompt: status, next command number and directory."""
        try:
            cwd = os.getcwd()
        except OSError:
            cwd = "error"
        if len(cwd) >= _PATH_MAX:
            cwd = "error"
        return f"[{self.last_status}]-[{self.history.count}]─[{cwd}]$ "

    def run_line(self, line):
        """Run one input line and return the last exit status.

        ``exit`` raises SystemExit(0).
        """
        if line.endswith("\n"):
            line = line[:-1]
        line = strip_comment(line)

        if line.startswith("!"):
            try:
                line = self.history.expand(line)
            except LookupError as exc:
                sys.stderr.write(f"{exc}\n")
                return self.last_status
            sys.stdout.write(f"{line}\n")

        raw = line
        args = tokenize(line, MAX_ARGS)
        if not args:
            return self.last_status

        background = args[-1] == "&"
        if background:
            args = args[:-1]
            if not args:
                return self.last_status

        is_history = args[0] == "history"
        entry = None if is_history else self.history.add(raw)
        start = _ticks()

        if args[0] == "exit":
            raise SystemExit(0)
        if is_history:
            show_time = len(args) > 1 and args[1] == "-t"
            sys.stdout.write(self.history.listing(show_time))
            self.last_status = 0
        elif args[0] == "cd":
            self._cd(args)
        else:
            status = self._run_pipeline(args, background)
            if status is not None:
                self.last_status = status

        if entry is not None:
            entry.duration_ms = (_ticks() - start) * 100
        return self.last_status

    def _cd(self, args):
        if len(args) < 2:
            sys.stdout.write("cd: argument missing\n")
            self.last_status = 1
            return
        try:
            os.chdir(args[1])
        except OSError:
            sys.stdout.write(f"chdir: no such file or directory: {args[1]}\n")
            self.last_status = 1
            return
        self.last_status = 0

    def _spawn(self, segment, stdin, stdout):
        """Start one pipeline segment; return the process or a failure status."""
        try:
            argv, redirects = _parse_redirects(segment)
        except ValueError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        opened = []
        try:
            for op, fname in redirects:
                try:
                    fd = os.open(fname, _REDIRECT_MODES[op], 0o666)
                except OSError:
                    sys.stderr.write(f"cannot open {fname}\n")
                    return 1
                opened.append(fd)
                if op == "<":
                    stdin = fd
                else:
                    stdout = fd
            sys.stdout.flush()
            sys.stderr.flush()
            try:
                return _start(argv[0] if argv else "", argv, stdin, stdout)
            except OSError as exc:
                sys.stderr.write(f"{exc}\n")
                return 1
        finally:
            for fd in opened:
                os.close(fd)

    def _run_pipeline(self, args, background):
        results = []
        prev_read = None
        segments = split_pipeline(args)
        for i, segment in enumerate(segments):
            read_end = write_end = None
            if i < len(segments) - 1:
                try:
                    read_end, write_end = os.pipe()
                except OSError:
                    sys.stderr.write("pipe failed\n")
                    break
            results.append(self._spawn(segment, prev_read, write_end))
            if prev_read is not None:
                os.close(prev_read)
            if write_end is not None:
                os.close(write_end)
            prev_read = read_end
        if prev_read is not None:
            os.close(prev_read)

        if background:
            self._jobs.extend(r for r in results if isinstance(r, subprocess.Popen))
            return None

        for job in self._jobs:
            job.wait()
        self._jobs.clear()
        statuses = [r.wait() if isinstance(r, subprocess.Popen) else r for r in results]
        return statuses[-1] if statuses else None


def _loop(shell, stream):
    try:
        while True:
            if not shell.script_mode:
                sys.stdout.write(shell.prompt())
                sys.stdout.flush()
            line = gets(stream, MAX_CMD_LEN)
            if not line:
                break
            shell.run_line(line)
            sys.stdout.flush()
    except SystemExit as exc:
        return exc.code or 0
    return 0


def main(argv=None):
    """Run a script named by the first argument, or read commands interactively."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        try:
            handle = open(args[0], encoding="latin-1", newline="")
        except OSError:
            sys.stderr.write(f"smash: cannot open {args[0]}\n")
            return 1
        with handle:
            return _loop(Shell(script_mode=True), handle)
    return _loop(Shell(), _FdReader(0))


if __name__ == "__main__":
    sys.exit(main())