"""Parse shell command lines into command trees."""

from dataclasses import dataclass, field

from tinyunix.layout import OpenFlag

MAXARGS = 10
WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"

_EOF = ""
_WORD = "a"
_APPEND = "+"

# token -> (open mode, file descriptor replaced)
_REDIRECTS = {
    "<": (OpenFlag.RDONLY, 0),
    ">": (OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC, 1),
    _APPEND: (OpenFlag.WRONLY | OpenFlag.CREATE, 1),
}


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed.

    ``leftovers`` holds the unparsed rest of the line when parsing stopped
    before its end.
    """

    def __init__(self, message, leftovers=None):
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    """Run a program with arguments."""

    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` opened on ``file``."""

    cmd: object
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: object
    right: object


@dataclass
class ListCmd:
    """Run ``left``, wait for it, then run ``right``."""

    left: object
    right: object


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: object


class _Parser:
    def __init__(self, line):
        self.s = line
        self.pos = 0

    def _skip(self):
        while self.pos < len(self.s) and self.s[self.pos] in WHITESPACE:
            self.pos += 1

    def at_end(self):
        self._skip()
        return self.pos >= len(self.s)

    def peek(self, toks):
        self._skip()
        return self.pos < len(self.s) and self.s[self.pos] in toks

    def gettoken(self):
        """Return (kind, text) of the next token and move past it."""
        self._skip()
        s, start = self.s, self.pos
        if start >= len(s):
            return _EOF, ""
        c = s[start]
        if c in "|();&<":
            kind, end = c, start + 1
        elif c == ">":
            if s.startswith(">>", start):
                kind, end = _APPEND, start + 2
            else:
                kind, end = ">", start + 1
        else:
            end = start
            while end < len(s) and s[end] not in WHITESPACE and s[end] not in SYMBOLS:
                end += 1
            kind = _WORD
        self.pos = end
        text = s[start:end]
        self._skip()
        return kind, text

    def parseline(self):
        cmd = self.parsepipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCmd(cmd, self.parseline())
        return cmd

    def parsepipe(self):
        cmd = self.parseexec()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCmd(cmd, self.parsepipe())
        return cmd

    def parseredirs(self, cmd):
        while self.peek("<>"):
            kind, _ = self.gettoken()
            file_kind, file = self.gettoken()
            if file_kind != _WORD:
                raise ShellSyntaxError("missing file for redirection")
            mode, fd = _REDIRECTS[kind]
            cmd = RedirCmd(cmd, file, mode, fd)
        return cmd

    def parseblock(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.gettoken()
        cmd = self.parseline()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.parseredirs(cmd)

    def parseexec(self):
        if self.peek("("):
            return self.parseblock()
        ecmd = ExecCmd()
        ret = self.parseredirs(ecmd)
        while not self.peek("|)&;"):
            kind, text = self.gettoken()
            if kind == _EOF:
                break
            if kind != _WORD:
                raise ShellSyntaxError("syntax")
            ecmd.argv.append(text)
            if len(ecmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parseredirs(ret)
        return ret


def parse(line):
    """Parse a whole command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.parseline()
    if not parser.at_end():
        raise ShellSyntaxError("syntax", leftovers=line[parser.pos:])
    return cmd