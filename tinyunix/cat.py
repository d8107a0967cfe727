"""Concatenate files to standard output, optionally numbering lines."""

import sys
from dataclasses import dataclass

_CHUNK = 512
_NL = ord("\n")

_FLAGS = {
    "n": "number",
    "b": "number_nonblank",
    "E": "show_ends",
    "s": "squeeze_blank",
}


@dataclass
class CatOptions:
    """Output options selected on the command line."""

    number: bool = False  # -n: number every line
    number_nonblank: bool = False  # -b: number non-empty lines only
    show_ends: bool = False  # -E: mark line ends with '$'
    squeeze_blank: bool = False  # -s: drop repeated newlines


def parse_options(argv):
    """Split ``argv`` into options and file names.

    Raises ValueError on an unknown option letter.
    """
    args = list(argv)
    options = CatOptions()
    i = 0
    while i < len(args) and args[i].startswith("-"):
        for flag in args[i][1:]:
            try:
                setattr(options, _FLAGS[flag], True)
            except KeyError:
                raise ValueError(f"cat: unknown option -{flag}") from None
        i += 1
    return options, args[i:]


class _Renderer:
    """Applies the options to a byte stream fed in pieces."""

    def __init__(self, options):
        self.options = options
        self.line = 1
        self.start = True
        self.blank_run = False

    def feed(self, chunk):
        opts = self.options
        out = bytearray()
        for c in chunk:
            if self.start:
                numbered = opts.number
                if opts.number_nonblank:
                    numbered = c != _NL
                if numbered:
                    out += f"{self.line:3d}  ".encode("ascii")
                    self.line += 1
                self.start = False

            if opts.squeeze_blank and c == _NL:
                if self.blank_run:
                    continue
                self.blank_run = True
            else:
                self.blank_run = False

            if opts.show_ends and c == _NL:
                out += b"$"
            out.append(c)
            if c == _NL:
                self.start = True
        return bytes(out)


def render(data, options):
    """Return ``data`` as cat would print it with ``options``."""
    return _Renderer(options).feed(bytes(data))


def _write_bytes(data):
    stream = sys.stdout
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        stream.write(data.decode("latin-1"))
        return
    stream.flush()
    buffer.write(data)
    buffer.flush()


def _cat(stream, options):
    renderer = _Renderer(options)
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        _write_bytes(renderer.feed(chunk))


def main(argv=None):
    """Run cat; return the exit status."""
    args = sys.argv[1:] if argv is None else argv
    try:
        options, files = parse_options(args)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if not files:
        try:
            _cat(sys.stdin.buffer, options)
        except OSError:
            sys.stderr.write("cat: read error\n")
            return 1
        return 0

    for name in files:
        try:
            handle = open(name, "rb")
        except OSError:
            sys.stderr.write(f"cat: cannot open {name}\n")
            return 1
        with handle:
            try:
                _cat(handle, options)
            except OSError:
                sys.stderr.write("cat: read error\n")
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())