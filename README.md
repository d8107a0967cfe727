# tinyunix

A small, self-contained Unix userland written in plain Python with no
third-party dependencies. It offers the classic tools of a teaching
operating system: file utilities, a minimal `grep`, three shells and a
handful of stress programs. It also has the helpers they share: a
`printf` with a small format language, page-table arithmetic, ELF header
parsing and a model of a free-list memory allocator.

## Installation

```
pip install .
```

Running the tests:

```
pip install .[test]
pytest
```

## Commands

Every command is installed with a `tu-` prefix so it never shadows the
system's own tools.

| Command | What it does |
| --- | --- |
| `tu-cat [-n] [-b] [-E] [-s] [file ...]` | Concatenate files. The options number all lines, number non-blank lines, mark line ends with `$` and squeeze runs of blank lines |
| `tu-grep pattern [file ...]` | Print lines matching a pattern that understands `^ . * $` |
| `tu-wc [file ...]` | Print line, word and byte counts |
| `tu-ls [path ...]` | List files with type, inode number and size |
| `tu-echo args...` | Print the arguments separated by spaces |
| `tu-kill pid...` | Kill processes |
| `tu-ln old new` | Make a hard link |
| `tu-mkdir dir...` | Create directories, stopping at the first failure |
| `tu-rm path...` | Remove files or empty directories, stopping at the first failure |
| `tu-sleep ticks` | Pause for a number of ticks of 0.1 s |
| `tu-sh` | A shell with pipes, lists (`;`), background jobs (`&`), grouping and `<`, `>`, `>>` redirection |
| `tu-myshell [script]` | A minimal shell with `cd`, `exit`, one pipe, `<`/`>` and `&`. It reads a script when given one |
| `tu-smash [script]` | A shell with a status prompt, `#` comments, `history [-t]`, `!!`, `!N`, `!prefix`, multi-stage pipelines and `<`, `>`, `>>` |
| `tu-grind` | Run pairs of workers doing random file-system and process operations in the current directory, forever |
| `tu-forktest` | Fork until it fails, then reap every child |
| `tu-stressfs` | Several processes write and read back their own files in the current directory |
| `tu-logstress file...` | Start one writer process per file, all at the same time |
| `tu-zombie`, `tu-dorphan`, `tu-forphan` | Leave behind a zombie, an orphaned directory or an orphaned file |

## Library use

```python
from tinyunix.fmt import format
from tinyunix.grep import match
from tinyunix.wc import count
from tinyunix.shparse import parse
from tinyunix.layout import pgroundup

format("%d items at %p", 3, 0x1000)   # '3 items at 0x0000000000001000'
match("^ab*c$", "abbbc")              # True
count(b"hello world\n").format("x")  # '1 2 12 x\n'
parse("ls > out; cat out | wc")       # a ListCmd tree
pgroundup(4097)                       # 8192
```

`tinyunix.elf` reads and writes ELF file and program headers.
`tinyunix.umalloc.Arena` models a first-fit free-list allocator.
`tinyunix.smash.History` keeps the numbered command history that
`tu-smash` uses.

## What it does not do

There is no process supervisor. Nothing starts a shell at boot or
restarts one when it exits. Run `tu-sh`, `tu-myshell` or `tu-smash`
directly.