"""A small printf that understands %d, %u, %x, %p, %c, %s and their l/ll forms."""

import operator
import re
import sys

_DIGITS = "0123456789ABCDEF"
_U32 = 0xFFFFFFFF
_U64 = (1 << 64) - 1

_DIRECTIVE = re.compile(r"%(ll[dux]|l[dux]|[duxpcs%]|.?)", re.DOTALL)

# conversion -> (bits of the argument, base, signed output)
_INTEGER = {
    "d": (32, 10, True),
    "ld": (64, 10, True),
    "lld": (64, 10, True),
    "u": (32, 10, False),
    "lu": (64, 10, False),
    "llu": (64, 10, False),
    "x": (32, 16, False),
    "lx": (64, 16, False),
    "llx": (64, 16, False),
}


def _as_signed(value, bits):
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def _integer(value, bits, base, signed):
    # The argument is read at its own width; the printed magnitude keeps
    # only its low 32 bits.
    value = _as_signed(operator.index(value), bits if bits == 32 and signed else 64)
    negative = signed and value < 0
    magnitude = (-value if negative else value) & _U32
    digits = []
    while True:
        digits.append(_DIGITS[magnitude % base])
        magnitude //= base
        if not magnitude:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _string(value):
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _char(value):
    if isinstance(value, str):
        return value[:1]
    return chr(operator.index(value) & 0xFF)


def format(fmt, *args):
    """Format ``args`` according to ``fmt`` and return the text."""
    remaining = iter(args)

    def next_arg():
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def convert(m):
        spec = m.group(1)
        if spec in _INTEGER:
            return _integer(next_arg(), *_INTEGER[spec])
        if spec == "p":
            return f"0x{operator.index(next_arg()) & _U64:016X}"
        if spec == "c":
            return _char(next_arg())
        if spec == "s":
            return _string(next_arg())
        if spec == "%":
            return "%"
        if not spec:
            return ""
        return "%" + spec

    return _DIRECTIVE.sub(convert, fmt)


def fprintf(stream, fmt, *args):
    """Write formatted text to ``stream``."""
    stream.write(format(fmt, *args))


def printf(fmt, *args):
    """Write formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)