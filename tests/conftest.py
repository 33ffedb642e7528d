"""Fixtures shared between tests."""
from typing import Iterator
import logging
import sys

import pytest


@pytest.fixture
def clean_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """init_logging() modifies global state, so ensure we undo that."""
    monkeypatch.setattr(sys, 'excepthook', sys.excepthook)
    monkeypatch.setattr(logging.getLogger(), 'handlers', [])
    monkeypatch.delenv('VMFKIT_DEBUG', raising=False)
    factory = logging.getLogRecordFactory()
    level = logging.getLogger().level
    yield
    logging.setLogRecordFactory(factory)
    logging.getLogger().setLevel(level)
