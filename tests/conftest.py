"""Shared fixtures for launcher tests."""

from __future__ import annotations

import itertools
import os
import stat
import sys
from pathlib import Path

import psutil
import pytest

from modlaunch.local.launcher import Installation


EXE_NAME = "game.exe"
PLUGIN_FILES = {"CoolMod.dll": b"\x00mod", "OtherMod/config.cfg": b"speed=2\n"}

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


class FakeProcess:
    """In-memory stand-in for psutil.Process with controllable exit behaviour."""

    def __init__(self, pid: int, name: str = "game", alive: bool = True,
                 exits_on_close: bool = True, killable: bool = True, children=()):
        self.pid = pid
        self._name = name
        self.alive = alive
        self.exits_on_close = exits_on_close
        self.killable = killable
        self._children = list(children)
        self.killed = False
        self.wait_timeouts = []

    def name(self):
        return self._name

    def is_running(self):
        return self.alive

    def status(self):
        return psutil.STATUS_RUNNING

    def wait(self, timeout=None):
        self.wait_timeouts.append(timeout)
        if self.alive:
            raise psutil.TimeoutExpired(timeout, pid=self.pid)
        return 0

    def children(self, recursive=False):
        return list(self._children)

    def kill(self):
        if not self.killable:
            raise psutil.AccessDenied(pid=self.pid)
        self.alive = False
        self.killed = True

    def terminate(self):
        if self.exits_on_close:
            self.alive = False


class FakeCloser:
    """Window closer that records requests. PIDs in `windowless` have no window."""

    def __init__(self, windowless=()):
        self.windowless = set(windowless)
        self.requests = []

    def request_close(self, proc):
        self.requests.append(proc.pid)
        if proc.pid in self.windowless:
            return False
        if proc.exits_on_close:
            proc.alive = False
        return True


class FakeSpawner:
    """Records spawn calls and what the plugin directory looked like at that moment."""

    def __init__(self, plugin_path: Path = None, fail: Exception = None):
        self.plugin_path = plugin_path
        self.fail = fail
        self.calls = []
        self.plugin_dir_present = []
        self.processes = []
        self._pids = itertools.count(1000)

    def __call__(self, args, cwd, name):
        self.calls.append((list(args), Path(cwd), name))
        if self.plugin_path is not None:
            self.plugin_dir_present.append(self.plugin_path.exists())
        if self.fail is not None:
            raise self.fail
        proc = FakeProcess(next(self._pids), name=name)
        self.processes.append(proc)
        return proc


def _fake_wait_procs(procs, timeout=None, callback=None):
    gone = [p for p in procs if not p.alive]
    alive = [p for p in procs if p.alive]
    return gone, alive


@pytest.fixture
def fake_wait_procs(monkeypatch):
    """Makes psutil.wait_procs understand FakeProcess objects."""
    monkeypatch.setattr(psutil, "wait_procs", _fake_wait_procs)


def make_installation(root: Path, with_exe: bool = True, with_plugins: bool = True,
                      with_loader: bool = True, with_script: bool = False, exe_body: str = None,
                      script_body: str = "#!/bin/sh\nexec ./game.exe\n") -> Installation:
    root.mkdir(parents=True, exist_ok=True)
    if with_exe:
        exe = root / EXE_NAME
        exe.write_text(exe_body or "")
        if exe_body:
            exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    if with_loader:
        (root / "BepInEx" / "core").mkdir(parents=True, exist_ok=True)
        (root / "winhttp.dll").write_bytes(b"MZ")
    if with_plugins:
        for rel, data in PLUGIN_FILES.items():
            target = root / "BepInEx" / "plugins" / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
    if with_script:
        (root / "run_bepinex.sh").write_text(script_body)
    return Installation(install_path=str(root), executable=EXE_NAME, name=root.name)


def plugin_tree(plugin_path: Path) -> dict:
    """Returns {relative path: bytes} for every file under a plugin directory."""
    return {
        str(p.relative_to(plugin_path)).replace(os.sep, "/"): p.read_bytes()
        for p in plugin_path.rglob("*") if p.is_file()
    }


@pytest.fixture
def game(tmp_path) -> Installation:
    """A modded installation: executable, BepInEx and two plugins present."""
    return make_installation(tmp_path / "Hollow Game")


@pytest.fixture
def plugins(game) -> Path:
    return Path(game.install_path) / "BepInEx" / "plugins"
