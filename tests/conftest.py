"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def roots(tmp_path: Path) -> tuple[Path, Path, Path]:
    """(slots, saves, backups) roots; only the slots root exists up front."""
    slots = tmp_path / "NineSols"
    slots.mkdir()
    return slots, tmp_path / "data" / "saves", tmp_path / "data" / "backups"
