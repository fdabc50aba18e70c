"""Decoded save metadata and decode outcome models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MetadataStatus(StrEnum):
    """Outcome of reading an entity's metadata."""

    DECODED = "decoded"
    MISSING = "missing"  # placeholder slot, nothing on disk
    DECODE_FAILED = "decode_failed"


class DecodePolicy(StrEnum):
    """What a scan does with an entity whose metadata fails to decode."""

    SKIP = "skip"
    FAIL = "fail"
    KEEP = "keep"


@dataclass(frozen=True)
class SaveMetadata:
    """Display fields decoded from a save's ``meta.txt``."""

    level: int
    playtime: float  # seconds
    gold: int
    gamemode: int
    scene_id: str
