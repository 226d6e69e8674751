"""Shared pytest fixtures.

``DiskParseCache()`` without an explicit root writes under ``FI_CACHE_DIR``
(or ``./.cache``). Every test gets its own cache root so a parse stored by
one test can never satisfy a lookup in another, and no test writes into the
working tree. ``FI_SUMMARY_MODEL`` is cleared so a developer's shell or
``.env`` cannot change which model name the summary tests observe.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _hermetic_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    cache_root = tmp_path / "fi-cache"
    monkeypatch.setenv("FI_CACHE_DIR", os.fspath(cache_root))
    monkeypatch.delenv("FI_SUMMARY_MODEL", raising=False)
    return cache_root
