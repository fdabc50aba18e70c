"""Application configuration — a flat JSON file with locked atomic writes."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from nine_saves.core.path_resolver import STEAM_APP_ID, default_data_dir

_instance: "Config | None" = None


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """Settings stored in ``config.json`` inside the config directory.

    Path settings left empty fall back to platform defaults: the game's own
    save location for ``slots_dir`` and the config directory itself for
    ``data_dir`` (parent of the saves, backups and logs directories).
    """

    _DEFAULTS: dict[str, Any] = {
        "slots_dir": "",
        "data_dir": "",
        "steam_app_id": STEAM_APP_ID,
        "debug": False,
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._dir = config_dir or default_data_dir()
        self._path = self._dir / "config.json"
        self._lock = threading.Lock()
        self._data: dict[str, Any] = dict(self._DEFAULTS)
        self._load()

    def _load(self) -> None:
        """Load config from disk over the defaults."""
        if not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                user_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load config, using defaults: {e}")
            return
        if not isinstance(user_data, dict):
            logger.warning(f"Ignoring config {self._path}: not a JSON object")
            return
        self._data.update(user_data)

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        with self._lock:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp_path.exists():
                    tmp_path.unlink(missing_ok=True)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    # ── Typed properties ──

    @property
    def config_dir(self) -> Path:
        return self._dir

    @property
    def config_path(self) -> Path:
        return self._path

    @property
    def data_dir(self) -> Path:
        raw = self._data.get("data_dir", "")
        return Path(raw) if raw else self._dir

    @data_dir.setter
    def data_dir(self, value: Path | None) -> None:
        self.set("data_dir", str(value) if value else "")

    @property
    def slots_dir(self) -> Path | None:
        raw = self._data.get("slots_dir", "")
        return Path(raw) if raw else None

    @slots_dir.setter
    def slots_dir(self, value: Path | None) -> None:
        self.set("slots_dir", str(value) if value else "")

    @property
    def steam_app_id(self) -> str:
        return str(self._data.get("steam_app_id") or STEAM_APP_ID)

    @property
    def debug(self) -> bool:
        return bool(self._data.get("debug", False))

    @debug.setter
    def debug(self, value: bool) -> None:
        self.set("debug", value)
