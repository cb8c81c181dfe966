"""
Configuration for pytest to set up the import path and shared fixtures.
"""

import itertools
import logging
import sys
from collections import Counter
from pathlib import Path

import pytest

# Add the parent directory to Python path so we can import seq, generators, etc.
parent_dir = Path(__file__).parent.parent
sys.path.insert(0, str(parent_dir))

# Import after path setup
import config
from seq import Seq


class CallTracker:
    """Wraps a function and records every argument it was called with."""

    def __init__(self, fn=None):
        self.fn = fn or (lambda value, *rest: value)
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args[0])
        return self.fn(*args)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def tracker():
    """Factory for call-tracking functions."""
    return CallTracker


@pytest.fixture
def counting_source():
    """
    Factory building a Seq over ``values`` (or the naturals when omitted)
    together with a Counter of how many times each position was produced.
    """
    def _build(values=None):
        produced = Counter()

        def source():
            iterable = itertools.count() if values is None else values
            for index, value in enumerate(iterable):
                produced[index] += 1
                yield value

        return Seq(source), produced
    return _build


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings and a clean environment."""
    for name in ("LAZYSEQ_MAX_SIZE", "LAZYSEQ_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config.reset_settings()
    yield
    config.reset_settings()
    for name in config.LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


def materialize(nested):
    """Turn a Seq of Seqs into a list of lists."""
    return [inner.to_list_unsafe() for inner in nested]
