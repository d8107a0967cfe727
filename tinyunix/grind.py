"""Run random file-system and process operations, forever or for a while."""

import os
import signal
import subprocess
import sys
import time
from collections import Counter

from tinyunix.coreutils import TICK_SECONDS

_MODULUS = 0x7FFFFFFF
_PACKAGE_PARENT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)

_CHILD_EXIT = ""
_CHILD_FORKFORK = (
    "import os\n"
    "if hasattr(os, 'fork'):\n"
    "    os.fork()\n"
    "    os.fork()\n"
)
_CHILD_SUICIDE = (
    "import os, signal\n"
    "os.kill(os.getpid(), getattr(signal, 'SIGKILL', signal.SIGTERM))\n"
)
_CHILD_PIPE = (
    "import os\n"
    "r, w = os.pipe()\n"
    "if os.write(w, b'x') != 1:\n"
    "    print('grind: pipe write failed')\n"
    "if os.read(r, 1) != b'x':\n"
    "    print('grind: pipe read failed')\n"
)
_CHILD_ECHO_HI = "import sys\nsys.stdout.buffer.write(b'hi\\n')\n"


class ParkMiller:
    """The Park-Miller minimal standard generator, as used by FreeBSD rand()."""

    def __init__(self, seed=1):
        self.state = seed

    def next(self):
        """Advance the generator and return a value in [0, 0x7ffffffd]."""
        x = self.state % 0x7FFFFFFE + 1
        hi, lo = divmod(x, 127773)
        x = 16807 * lo - 2836 * hi
        if x < 0:
            x += _MODULUS
        x -= 1
        self.state = x
        return x


class _Grinder:
    """Holds one worker's state: its root, current directory, fd and heap."""

    def __init__(self, root):
        self.root = os.path.abspath(root)
        self.cwd = self.root
        self.fd = -1
        self.heap = bytearray()
        self.buf = bytearray(999)
        self.actions = {
            1: lambda: self._touch("grindir/../a"),
            2: lambda: self._touch("grindir/../grindir/../b"),
            3: lambda: self._unlink("grindir/../a"),
            4: self._unlink_from_grindir,
            5: lambda: self._reopen("/grindir/../a"),
            6: lambda: self._reopen("/./grindir/./../b"),
            7: self._write_buf,
            8: self._read_buf,
            9: self._dir_a,
            10: self._dir_b,
            11: self._link_b,
            12: self._link_a,
            13: lambda: self._run_child(_CHILD_EXIT),
            14: lambda: self._run_child(_CHILD_FORKFORK),
            15: lambda: self.heap.extend(bytes(6011)),
            16: self.heap.clear,
            17: self._create_and_wander,
            18: lambda: self._run_child(_CHILD_SUICIDE),
            19: lambda: self._run_child(_CHILD_PIPE),
            20: self._orphan_dir,
            21: self._check_fresh_file,
            22: self._pipeline,
        }

    # -- paths ---------------------------------------------------------

    def _resolve(self, path):
        base = self.root if path.startswith("/") else self.cwd
        parts = path.split("/")
        i = 0
        while i < len(parts) and (
            parts[i] in ("", ".") or (parts[i] == ".." and base == self.root)
        ):
            i += 1
        rest = parts[i:]
        return os.path.join(base, *rest) if rest else base

    def _chdir(self, path):
        target = self._resolve(path)
        if not os.path.isdir(target):
            return False
        target = os.path.normpath(target)
        if os.path.commonpath([self.root, target]) != self.root:
            target = self.root
        self.cwd = target
        return True

    # -- primitive operations that, like system calls, may fail --------

    def _open(self, path):
        try:
            return os.open(self._resolve(path), os.O_CREAT | os.O_RDWR, 0o666)
        except OSError:
            return -1

    @staticmethod
    def _close(fd):
        if fd >= 0:
            try:
                os.close(fd)
            except OSError:
                pass

    def _touch(self, path):
        self._close(self._open(path))

    def _unlink(self, path):
        target = self._resolve(path)
        try:
            if os.path.isdir(target) and not os.path.islink(target):
                os.rmdir(target)
            else:
                os.unlink(target)
        except OSError:
            pass

    def _mkdir(self, path):
        try:
            os.mkdir(self._resolve(path))
        except OSError:
            pass

    def _link(self, old, new):
        try:
            os.link(self._resolve(old), self._resolve(new))
        except OSError:
            pass

    def _run_child(self, script):
        try:
            subprocess.run(
                [sys.executable, "-c", script],
                cwd=self.root,
                stdin=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            raise RuntimeError("grind: fork failed") from None

    # -- actions -------------------------------------------------------

    def _unlink_from_grindir(self):
        if not self._chdir("grindir"):
            raise RuntimeError("grind: chdir grindir failed")
        self._unlink("../b")
        self._chdir("/")

    def _reopen(self, path):
        self._close(self.fd)
        self.fd = self._open(path)

    def _write_buf(self):
        if self.fd >= 0:
            try:
                os.write(self.fd, self.buf)
            except OSError:
                pass

    def _read_buf(self):
        if self.fd >= 0:
            try:
                data = os.read(self.fd, len(self.buf))
            except OSError:
                return
            self.buf[:len(data)] = data

    def _dir_a(self):
        self._mkdir("grindir/../a")
        self._touch("a/../a/./a")
        self._unlink("a/a")

    def _dir_b(self):
        self._mkdir("/../b")
        self._touch("grindir/../b/b")
        self._unlink("b/b")

    def _link_b(self):
        self._unlink("b")
        self._link("../grindir/./../a", "../b")

    def _link_a(self):
        self._unlink("../grindir/../a")
        self._link(".././b", "/grindir/../a")

    def _create_and_wander(self):
        self._touch("a")
        if not self._chdir("../grindir/.."):
            raise RuntimeError("grind: chdir failed")

    def _orphan_dir(self):
        saved = self.cwd
        try:
            self._unlink("a")
            self._mkdir("a")
            self._chdir("a")
            self._unlink("../a")
            fd = self._open("x")
            self._unlink("x")
            self._close(fd)
        finally:
            self.cwd = saved

    def _check_fresh_file(self):
        self._unlink("c")
        fd = self._open("c")
        if fd < 0:
            raise RuntimeError("grind: create c failed")
        try:
            try:
                written = os.write(fd, b"x")
            except OSError:
                written = -1
            if written != 1:
                raise RuntimeError("grind: write c failed")
            try:
                st = os.fstat(fd)
            except OSError:
                raise RuntimeError("grind: fstat failed") from None
            if st.st_size != 1:
                raise RuntimeError(f"grind: fstat reports wrong size {st.st_size}")
        finally:
            self._close(fd)
        self._unlink("c")

    def _pipeline(self):
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (_PACKAGE_PARENT, env.get("PYTHONPATH")) if p
        )
        try:
            echo = subprocess.Popen(
                [sys.executable, "-c", _CHILD_ECHO_HI],
                cwd=self.root, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE,
            )
        except OSError:
            raise RuntimeError("grind: fork failed") from None
        try:
            cat = subprocess.Popen(
                [sys.executable, "-m", "tinyunix.cat"],
                cwd=self.root, stdin=echo.stdout, stdout=subprocess.PIPE, env=env,
            )
        except OSError:
            echo.stdout.close()
            echo.wait()
            raise RuntimeError("grind: fork failed") from None
        echo.stdout.close()
        out = cat.stdout.read(3)
        cat.stdout.close()
        st1 = echo.wait()
        st2 = cat.wait()
        if st1 != 0 or st2 != 0 or out != b"hi\n":
            text = out.decode("latin-1")
            raise RuntimeError(f'grind: exec pipeline failed {st1} {st2} "{text}"')

    # -- driver --------------------------------------------------------

    def run(self, which_child, rng, iterations):
        self._mkdir("grindir")
        if not self._chdir("grindir"):
            raise RuntimeError("grind: chdir grindir failed")
        self._chdir("/")

        counts = Counter()
        iters = 0
        try:
            while iterations is None or iters < iterations:
                iters += 1
                if iters % 500 == 0:
                    sys.stdout.write("B" if which_child else "A")
                    sys.stdout.flush()
                what = rng.next() % 23
                counts[what] += 1
                action = self.actions.get(what)
                if action is not None:
                    action()
        finally:
            self._close(self.fd)
            self.fd = -1
        return counts


def go(which_child, rng, iterations=None):
    """Perform random operations in the current directory.

    Runs ``iterations`` steps (forever if None) drawing from ``rng`` and
    returns how often each of the 23 actions was chosen. Raises
    RuntimeError when an operation that must succeed fails.
    """
    return _Grinder(os.getcwd()).run(which_child, rng, iterations)


def _child(which_child, seed):
    try:
        go(which_child, ParkMiller(seed))
    except RuntimeError as exc:
        sys.stdout.write(f"{exc}\n")
        return 1
    finally:
        sys.stdout.flush()
    return 0


def _fork(work, *args):
    sys.stdout.flush()
    pid = os.fork()
    if pid == 0:
        status = 1
        try:
            status = work(*args)
        finally:
            sys.stdout.flush()
            os._exit(status)
    return pid


def _iteration(seed):
    grinder = _Grinder(os.getcwd())
    grinder._unlink("a")
    grinder._unlink("b")

    pids = []
    for which, mask in ((0, 31), (1, 7177)):
        try:
            pids.append(_fork(_child, which, seed ^ mask))
        except OSError:
            sys.stdout.write("grind: fork failed\n")
            return 1

    _, status = os.waitpid(-1, 0)
    if os.waitstatus_to_exitcode(status) != 0:
        for pid in pids:
            try:
                os.kill(pid, _KILL_SIGNAL)
            except OSError:
                pass
    os.waitpid(-1, 0)
    return 0


def main(argv=None):
    """Run pairs of random workers in the current directory, forever."""
    seed = 1
    while True:
        try:
            pid = _fork(_iteration, seed)
        except OSError:
            pid = -1
        if pid > 0:
            os.waitpid(pid, 0)
        time.sleep(20 * TICK_SECONDS)
        seed += 1


if __name__ == "__main__":
    sys.exit(main())