"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _clean_work_loop_env(monkeypatch):
    """Keep host ``WORK_LOOP_*`` variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("WORK_LOOP_"):
            monkeypatch.delenv(name, raising=False)
