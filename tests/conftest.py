"""Shared test fixtures for the scriptconf test suite."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from scriptconf.store import ConfigStore


DEMO_SCRIPT = """
Config = {
    Window = { Width = 800, Height = 600, Fullscreen = false, Scale = 1.5 },
    Title = "Demo",
}
"""


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], str]:
    """Factory that writes a Lua script into tmp_path and returns its relative name."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return name

    return _write


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    """A fresh, uninitialized store whose base_dir is tmp_path."""
    s = ConfigStore(base_dir=tmp_path)
    yield s
    s.cleanup()


@pytest.fixture
def demo_store(store: ConfigStore, write_script: Callable[[str, str], str]) -> ConfigStore:
    """A store with the demo settings script already loaded."""
    assert store.load(write_script("settings.cfg", DEMO_SCRIPT)) is True
    return store
