import subprocess

import pytest

from wakeful.core.config import InhibitConfig
from wakeful.core.errors import WakeLockUnavailable, WakeLockUnderLocked
from wakeful.power import inhibitor
from wakeful.power.inhibitor import WakeLock


class FakeProc:
    _next_pid = 100

    def __init__(self, cmd, exit_code=None, stubborn=False):
        self.cmd = cmd
        self.returncode = exit_code
        self.stubborn = stubborn
        self.terminated = False
        self.killed = False
        FakeProc._next_pid += 1
        self.pid = FakeProc._next_pid

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True

    def kill(self):
        self.killed = True

    def wait(self, timeout=None):
        if self.stubborn and not self.killed:
            raise subprocess.TimeoutExpired(self.cmd, timeout)
        self.returncode = -15
        return self.returncode


@pytest.fixture
def spawned(monkeypatch):
    procs = []

    def fake_popen(cmd, **kwargs):
        p = FakeProc(cmd)
        procs.append(p)
        return p

    monkeypatch.setattr(inhibitor.subprocess, "Popen", fake_popen)
    return procs


def test_command_line():
    lock = WakeLock(InhibitConfig(who="Test", why="because"))
    assert lock.command() == [
        "systemd-inhibit",
        "--what=idle:sleep",
        "--who=Test",
        "--why=because",
        "--mode=block",
        "sleep", "infinity",
    ]


def test_acquire_and_release(spawned):
    lock = WakeLock()
    assert not lock.held

    lock.acquire()
    assert lock.held
    assert len(spawned) == 1

    lock.release()
    assert not lock.held
    assert spawned[0].terminated
    assert not spawned[0].killed


def test_reference_counted(spawned):
    lock = WakeLock()
    lock.acquire()
    lock.acquire()
    assert lock.count == 2

    lock.release()
    assert lock.held
    # newest child goes first
    assert spawned[1].terminated and not spawned[0].terminated

    lock.release_all()
    assert not lock.held


def test_release_not_held_raises():
    with pytest.raises(WakeLockUnderLocked):
        WakeLock().release()


def test_missing_binary(monkeypatch):
    def boom(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(inhibitor.subprocess, "Popen", boom)
    lock = WakeLock()
    with pytest.raises(WakeLockUnavailable):
        lock.acquire()
    assert not lock.held


def test_refused_by_logind(monkeypatch):
    monkeypatch.setattr(inhibitor.subprocess, "Popen", lambda cmd, **kw: FakeProc(cmd, exit_code=1))
    lock = WakeLock()
    with pytest.raises(WakeLockUnavailable):
        lock.acquire()
    assert not lock.held


def test_stubborn_child_is_killed(monkeypatch):
    proc = FakeProc(["systemd-inhibit"], stubborn=True)
    monkeypatch.setattr(inhibitor.subprocess, "Popen", lambda cmd, **kw: proc)
    lock = WakeLock()
    lock.acquire()
    lock.release()
    assert proc.terminated and proc.killed
    assert not lock.held
