"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nine_saves.config import Config
    from nine_saves.core.actions import ActionController
    from nine_saves.core.backup import BackupEngine
    from nine_saves.core.path_resolver import GamePaths
    from nine_saves.core.repository import SaveRepository


@dataclass
class AppContext:
    """
    Central service container.

    Built once at startup from the resolved roots; the host only talks to
    ``actions`` and reads ``repository``.
    """

    config: Config
    paths: GamePaths
    repository: SaveRepository
    engine: BackupEngine
    actions: ActionController
