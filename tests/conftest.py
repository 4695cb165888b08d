"""Test configuration for pytest."""
from __future__ import annotations

import os
from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def change_to_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Change to temporary directory for each test."""
    original_dir = os.getcwd()
    monkeypatch.chdir(tmp_path)
    for var in list(os.environ):
        if var.startswith('ORGANIZER_'):
            monkeypatch.delenv(var)
    yield
    os.chdir(original_dir)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create files (relative paths) under a fresh source directory."""
    def _make(*names: str, root: str = 'source') -> Path:
        base = tmp_path / root
        base.mkdir(parents=True, exist_ok=True)
        for name in names:
            path = base / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f'content of {name}')
        return base
    return _make
