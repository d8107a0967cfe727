"""Small helpers shared by the user programs."""


def atoi(s):
    """Return the value of the leading decimal digits of ``s`` (0 if none)."""
    n = 0
    for ch in s:
        if not "0" <= ch <= "9":
            break
        n = n * 10 + ord(ch) - ord("0")
    return n


def gets(stream, max):
    """Read one line of at most ``max - 1`` characters, keeping its terminator.

    Reading stops after a newline or carriage return; an empty result
    means end of input.
    """
    empty = stream.read(0)
    parts = []
    while len(parts) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        parts.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    return empty.join(parts)