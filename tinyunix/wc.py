"""Count lines, words and bytes."""

import sys
from dataclasses import dataclass

_CHUNK = 512
_NL = ord("\n")
_WHITESPACE = frozenset(b" \r\t\n\v")


@dataclass
class Counts:
    """Line, word and byte totals."""

    lines: int = 0
    words: int = 0
    chars: int = 0

    def format(self, name):
        """Render the totals as one output line."""
        return f"{self.lines} {self.words} {self.chars} {name}\n"


def count(data):
    """Count ``data``: a bytes object or an iterable of byte chunks."""
    chunks = [data] if isinstance(data, (bytes, bytearray, memoryview)) else data
    counts = Counts()
    inword = False
    for chunk in chunks:
        for c in bytes(chunk):
            counts.chars += 1
            if c == _NL:
                counts.lines += 1
            if c in _WHITESPACE:
                inword = False
            elif not inword:
                counts.words += 1
                inword = True
    return counts


def _chunks(stream):
    return iter(lambda: stream.read(_CHUNK), b"")


def _wc(stream, name):
    try:
        counts = count(_chunks(stream))
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(counts.format(name))
    return True


def main(argv=None):
    """Run wc; return the exit status."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        return 0 if _wc(sys.stdin.buffer, "") else 1

    for name in args:
        try:
            handle = open(name, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {name}\n")
            return 1
        with handle:
            if not _wc(handle, name):
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())