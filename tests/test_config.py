from __future__ import annotations

import argparse
import os

import pytest

from arlaunch.core import paths
from arlaunch.core.config import DEFAULT_DEBOUNCE, ConfigError, LauncherConfig, load_config


def ns(**kwargs) -> argparse.Namespace:
    base = dict(debounce=None, display=None, pidfile=None, verbose=False, daemonize=False, daemon_child=False)
    base.update(kwargs)
    return argparse.Namespace(**base)


def test_defaults(tmp_path):
    config = load_config(ns(), {"XDG_RUNTIME_DIR": str(tmp_path)})
    assert config.debounce_window == DEFAULT_DEBOUNCE == 3.0
    assert config.verbose is False
    assert config.daemonize is False
    assert config.display is None
    assert config.pidfile == os.path.join(str(tmp_path), "autorandr-launcher.pid")


def test_config_is_immutable():
    config = LauncherConfig()
    with pytest.raises(Exception):
        config.debounce_window = 1.0


def test_env_overrides():
    env = {
        "AUTORANDR_LAUNCHER_DEBOUNCE": "1.5",
        "AUTORANDR_LAUNCHER_PIDFILE": "/tmp/arl.pid",
        "DISPLAY": ":1",
    }
    config = load_config(ns(), env)
    assert config.debounce_window == 1.5
    assert config.pidfile == "/tmp/arl.pid"
    assert config.display == ":1"


def test_cli_beats_env():
    env = {"AUTORANDR_LAUNCHER_DEBOUNCE": "1.5", "DISPLAY": ":1"}
    config = load_config(ns(debounce="7", display=":2", pidfile="/run/x.pid"), env)
    assert config.debounce_window == 7.0
    assert config.display == ":2"
    assert config.pidfile == "/run/x.pid"


def test_daemon_flags():
    assert load_config(ns(daemonize=True), {}).daemonize is True
    assert load_config(ns(daemon_child=True, verbose=True), {}).daemonize is True
    assert load_config(ns(verbose=True), {}).verbose is True


@pytest.mark.parametrize("raw", ["soon", "-1", "nan", "inf", "1e400"])
def test_invalid_debounce(raw):
    with pytest.raises(ConfigError):
        load_config(ns(debounce=raw), {})


def test_invalid_env_debounce():
    with pytest.raises(ConfigError) as excinfo:
        load_config(ns(), {"AUTORANDR_LAUNCHER_DEBOUNCE": "x"})
    assert "AUTORANDR_LAUNCHER_DEBOUNCE" in str(excinfo.value)


def test_pidfile_falls_back_to_cache(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert paths.default_pidfile({}) == os.path.join(str(tmp_path), ".cache", "autorandr-launcher.pid")
