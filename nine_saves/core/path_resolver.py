"""Game and app-data directory discovery."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from platformdirs import user_data_path

from nine_saves.errors import DirectoryUnavailable

if TYPE_CHECKING:
    from nine_saves.config import Config

APP_NAME = "nine_saves"
STEAM_APP_ID = "1809540"

_GAME_DIR = ("AppData", "LocalLow", "RedCandleGames", "NineSols")


@dataclass(frozen=True)
class GamePaths:
    """The three roots the repository scans."""

    slots_root: Path
    saves_root: Path
    backups_root: Path


def default_slots_dir(steam_app_id: str = STEAM_APP_ID, system: str | None = None) -> Path:
    """Where the game keeps its slots on this OS (not checked for existence)."""
    system = system or platform.system()
    if system == "Windows":
        return Path.home().joinpath(*_GAME_DIR)
    if system == "Linux":
        # Proton prefix of the Steam release
        return user_data_path().joinpath(
            "Steam", "steamapps", "compatdata", steam_app_id,
            "pfx", "drive_c", "users", "steamuser", *_GAME_DIR,
        )
    raise DirectoryUnavailable(f"Nine Sols save location is unknown on {system}")


def default_data_dir() -> Path:
    return user_data_path(APP_NAME, appauthor=False)


def resolve_slots_dir(config: Config) -> Path:
    path = config.slots_dir or default_slots_dir(config.steam_app_id)
    if not path.is_dir():
        raise DirectoryUnavailable(
            f"Could not find Nine Sols save directory at {path}. Please report this "
            "bug along with the path where your saves are actually stored.",
            path,
        )
    return path


def resolve_paths(config: Config) -> GamePaths:
    """Resolve all roots once at startup. Raises DirectoryUnavailable."""
    data_dir = config.data_dir
    return GamePaths(
        slots_root=resolve_slots_dir(config),
        saves_root=data_dir / "saves",
        backups_root=data_dir / "backups",
    )
