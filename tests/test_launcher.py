from __future__ import annotations

import subprocess
import sys

import pytest

from arlaunch.core import launcher
from arlaunch.core.launcher import DEFAULT_COMMAND, SpawnError, spawn


class FakePopen:
    calls: list = []

    def __init__(self, argv, **kwargs):
        FakePopen.calls.append((argv, kwargs))
        self.pid = 4242


def test_default_command():
    assert DEFAULT_COMMAND == ("autorandr", "--change", "--force", "--default", "default")


def test_spawn_detaches(monkeypatch):
    FakePopen.calls = []
    monkeypatch.setattr(launcher.subprocess, "Popen", FakePopen)

    assert spawn() == 4242

    argv, kwargs = FakePopen.calls[0]
    assert argv == ["autorandr", "--change", "--force", "--default", "default"]
    assert kwargs["start_new_session"] is True
    assert kwargs["stdin"] is subprocess.DEVNULL
    assert kwargs["stdout"] is subprocess.DEVNULL
    assert kwargs["stderr"] is subprocess.DEVNULL


def test_spawn_wraps_os_errors(monkeypatch):
    def missing(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(launcher.subprocess, "Popen", missing)

    with pytest.raises(SpawnError) as excinfo:
        spawn()
    assert "autorandr" in str(excinfo.value)


def test_spawn_missing_executable():
    with pytest.raises(SpawnError):
        spawn(["/nonexistent/autorandr-launcher-test-binary"])


def test_spawn_real_process_returns_pid():
    pid = spawn([sys.executable, "-c", "pass"])
    assert pid > 0
