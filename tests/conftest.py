import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_arlaunch_logger(monkeypatch):
    for name in ("AUTORANDR_LAUNCHER_DEBOUNCE", "AUTORANDR_LAUNCHER_PIDFILE"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("arlaunch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
