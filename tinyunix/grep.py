"""Print lines matching a simple pattern (supports ^ . * $)."""

import os
import sys

_BUFSIZE = 1024


def match(re, text):
    """True if the pattern ``re`` matches somewhere in ``text``."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, ti) for ti in range(len(text) + 1))


def _matchhere(re, ri, text, ti):
    """Match ``re[ri:]`` at the start of ``text[ti:]``."""
    while True:
        if ri == len(re):
            return True
        if ri + 1 < len(re) and re[ri + 1] == "*":
            return _matchstar(re[ri], re, ri + 2, text, ti)
        if re[ri] == "$" and ri + 1 == len(re):
            return ti == len(text)
        if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
            ri += 1
            ti += 1
            continue
        return False


def _matchstar(c, re, ri, text, ti):
    """Match ``c*`` followed by ``re[ri:]`` at the start of ``text[ti:]``."""
    while True:
        if _matchhere(re, ri, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
            continue
        return False


def grep_lines(pattern, stream):
    """Yield the newline-terminated lines of ``stream`` that match ``pattern``.

    A final line without a newline is never reported, and a line too long
    for the read buffer ends the search.
    """
    for line in stream:
        if not line.endswith("\n"):
            return
        body = line[:-1]
        if len(body) >= _BUFSIZE - 1:
            return
        if match(pattern, body):
            yield line


def _text_lines(binary):
    return (line.decode("latin-1") for line in binary)


def _emit(lines):
    stream = sys.stdout
    buffer = getattr(stream, "buffer", None)
    for line in lines:
        if buffer is None:
            stream.write(line)
        else:
            stream.flush()
            buffer.write(line.encode("latin-1"))
            buffer.flush()


def main(argv=None):
    """Run grep; return the exit status."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern = os.fsencode(args[0]).decode("latin-1")
    files = args[1:]

    if not files:
        _emit(grep_lines(pattern, _text_lines(sys.stdin.buffer)))
        return 0

    for name in files:
        try:
            handle = open(name, "rb")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with handle:
            _emit(grep_lines(pattern, _text_lines(handle)))
    return 0


if __name__ == "__main__":
    sys.exit(main())