from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

_HOSTOPS_ENV = (
    "HOSTOPS_API_ORIGIN",
    "HOSTOPS_ACCESS_TOKEN",
    "HOSTOPS_PROJECT",
    "HOSTOPS_POLL_TIMEOUT",
    "HOSTOPS_POLL_MAX_BACKOFF",
)


@pytest.fixture(autouse=True)
def _clean_hostops_env(monkeypatch):
    """Keep a developer's shell configuration out of the tests."""
    for name in _HOSTOPS_ENV:
        monkeypatch.delenv(name, raising=False)
