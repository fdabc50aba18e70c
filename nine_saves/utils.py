"""Shared utility functions."""

from __future__ import annotations

ILLEGAL_FILENAME_CHARS = '<>:"/\\|?*'


def format_playtime(seconds: float) -> str:
    """Format play time as ``"12h 5m"`` (hours omitted when zero)."""
    hours = int(seconds // 3600)
    minutes = int(seconds // 60) % 60
    return f"{hours}h {minutes}m" if hours else f"{minutes}m"


def sanitize_filename(name: str) -> str:
    """Remove or replace illegal filename characters."""
    for ch in ILLEGAL_FILENAME_CHARS:
        name = name.replace(ch, "_")
    name = name.replace("\n", " ").replace("\r", "").strip()
    return name.strip(". ")


def is_valid_save_name(name: str) -> bool:
    """True if *name* can be used verbatim as an external save directory."""
    return bool(name) and sanitize_filename(name) == name
