"""Stress programs: fork limits, concurrent writers, orphans and zombies."""

import os
import sys
import time

from tinyunix.coreutils import TICK_SECONDS

FORK_LIMIT = 1000
_STRESSFS_BLOCK = 512
_STRESSFS_COUNT = 20
_LOG_WRITES = 250
_LOG_SIZE = 2000


class StressError(Exception):
    """Raised when a stress run observes a failure."""

    def __init__(self, message, status=1):
        super().__init__(message)
        self.status = status


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def _say(text):
    sys.stdout.write(text)
    sys.stdout.flush()


def _spawn(work, *args):
    """Fork a child that runs ``work(*args)`` and exits with its result."""
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


def _reap(pid):
    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)


def forktest(limit=FORK_LIMIT):
    """Fork until fork fails, then reap every child; return how many forked.

    Raises StressError if all ``limit`` forks succeed, if a wait fails too
    early, or if a wait succeeds once all children are reaped.
    """
    n = 0
    while n < limit:
        try:
            pid = os.fork()
        except OSError:
            break
        if pid == 0:
            os._exit(0)
        n += 1

    if n == limit:
        for _ in range(n):
            try:
                os.waitpid(-1, 0)
            except ChildProcessError:
                break
        raise StressError("fork claimed to work N times!")

    for _ in range(n):
        try:
            os.waitpid(-1, 0)
        except ChildProcessError:
            raise StressError("wait stopped early") from None

    try:
        os.waitpid(-1, 0)
    except ChildProcessError:
        return n
    raise StressError("wait got too many")


def _stressfs_worker(directory, i):
    _say(f"write {i}\n")
    path = os.path.join(directory, f"stressfs{i}")
    data = b"a" * _STRESSFS_BLOCK
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    try:
        for _ in range(_STRESSFS_COUNT):
            os.write(fd, data)
    finally:
        os.close(fd)

    _say("read\n")
    fd = os.open(path, os.O_RDONLY)
    try:
        for _ in range(_STRESSFS_COUNT):
            os.read(fd, _STRESSFS_BLOCK)
    finally:
        os.close(fd)
    return 0


def stressfs(directory):
    """Have five processes each write and read back a file in ``directory``.

    Returns the paths written.
    """
    _say("stressfs starting\n")
    pids = []
    for i in range(1, 5):
        try:
            pids.append(_spawn(_stressfs_worker, directory, i))
        except OSError:
            break

    failure = None
    try:
        _stressfs_worker(directory, 0)
    except OSError as exc:
        failure = StressError(f"stressfs: {exc}")
    statuses = [_reap(pid) for pid in pids]
    if failure is not None:
        raise failure
    for status in statuses:
        if status != 0:
            raise StressError(f"stressfs: writer exited with status {status}", status)
    return [os.path.join(directory, f"stressfs{i}") for i in range(len(pids) + 1)]


def _logstress_worker(path, i):
    try:
        fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    except OSError:
        _say(f"logstress: create {path} failed\n")
        return 1
    data = bytes([(ord("0") + i) & 0xFF]) * _LOG_SIZE
    try:
        for _ in range(_LOG_WRITES):
            try:
                n = os.write(fd, data)
            except OSError:
                n = -1
            if n != _LOG_SIZE:
                _say(f"write failed {n}\n")
                return 1
    finally:
        os.close(fd)
    return 0


def logstress(paths):
    """Write to each path from its own process, all at once.

    Raises StressError carrying the exit status of the first writer that
    failed.
    """
    pids = []
    failure = None
    for i, path in enumerate(paths, 1):
        try:
            pids.append(_spawn(_logstress_worker, os.fspath(path), i))
        except OSError:
            failure = StressError("logstress: fork failed")
            break
    statuses = [_reap(pid) for pid in pids]
    if failure is not None:
        raise failure
    for status in statuses:
        if status != 0:
            raise StressError(f"logstress: writer exited with status {status}", status)


def forktest_main(argv=None):
    """Check that fork fails gracefully once resources run out."""
    _say("fork test\n")
    try:
        forktest()
    except StressError as exc:
        _say(f"{exc}\n")
        return 1
    _say("fork test OK\n")
    return 0


def stressfs_main(argv=None):
    """Run stressfs in the current directory."""
    try:
        stressfs(os.getcwd())
    except StressError as exc:
        _say(f"{exc}\n")
        return exc.status
    return 0


def logstress_main(argv=None):
    """Run logstress on the files named in ``argv``."""
    try:
        logstress(_args(argv))
    except StressError as exc:
        _say(f"{exc}\n")
        return exc.status
    return 0


def zombie_main(argv=None):
    """Leave a child that exits before its parent."""
    sys.stdout.flush()
    pid = os.fork()
    if pid == 0:
        os._exit(0)
    if pid > 0:
        time.sleep(5 * TICK_SECONDS)
    return 0


def _sit_forever():
    while True:
        time.sleep(1000 * TICK_SECONDS)


def dorphan_main(argv=None):
    """Make the current directory an unlinked one, then wait to be killed."""
    s = "dorphan"
    try:
        os.mkdir("dd")
    except OSError:
        _say(f"{s}: mkdir dd failed\n")
        return 1
    try:
        os.chdir("dd")
    except OSError:
        _say(f"{s}: chdir dd failed\n")
        return 1
    try:
        os.rmdir("../dd")
    except OSError:
        _say(f"{s}: unlink failed\n")
        return 1
    _say("wait for kill and reclaim\n")
    _sit_forever()


def forphan_main(argv=None):
    """Hold an unlinked file open, then wait to be killed."""
    s = "forphan"
    name = "file0"
    try:
        fd = os.open(name, os.O_CREAT | os.O_WRONLY, 0o666)
    except OSError:
        _say(f"{s}: open failed\n")
        return 1
    try:
        st = os.fstat(fd)
    except OSError:
        sys.stderr.write(f"{s}: cannot stat ff\n")
        return 1
    try:
        os.unlink(name)
    except OSError:
        _say(f"{s}: unlink failed\n")
        return 1
    try:
        again = os.open(name, os.O_RDONLY)
    except OSError:
        pass
    else:
        os.close(again)
        _say(f"{s}: open successed\n")
        return 1
    _say(f"wait for kill and reclaim {st.st_ino}\n")
    _sit_forever()