"""Action controller — turns a host's selections into backup engine calls."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from nine_saves.errors import NineSavesError
from nine_saves.utils import is_valid_save_name

if TYPE_CHECKING:
    from nine_saves.core.backup import BackupEngine
    from nine_saves.core.repository import SaveRepository
    from nine_saves.models.save_entity import SaveEntity


class Action(StrEnum):
    SAVE_SLOT_TO_NEW_EXTERNAL = "save_slot_to_new_external"
    WRITE_SLOT_TO_EXTERNAL = "write_slot_to_external"
    WRITE_EXTERNAL_TO_SLOT = "write_external_to_slot"
    DELETE_EXTERNAL = "delete_external"


class ActionController:
    """
    Selection state plus the four user actions.

    Failures never escape ``perform()`` or ``try_refresh()``: they land in
    ``error_status`` for the host to display, and the controller stays usable.
    """

    def __init__(
        self,
        repository: SaveRepository | None,
        engine: BackupEngine | None,
    ) -> None:
        self.repository = repository
        self.engine = engine
        self.slot_selected: int | None = None
        self.external_selected: int | None = None
        self.action_selected: Action | None = None
        self.new_save_name = ""
        self.error_status: str | None = None

    @classmethod
    def degraded(cls, message: str) -> ActionController:
        """Controller for a process that failed to start; only shows the error."""
        controller = cls(None, None)
        controller.error_status = message
        return controller

    # ── Selection helpers ──

    @property
    def selected_slot(self) -> SaveEntity | None:
        if self.repository is None or self.slot_selected is None:
            return None
        return self.repository.slots[self.slot_selected]

    @property
    def selected_save(self) -> SaveEntity | None:
        if self.repository is None or self.external_selected is None:
            return None
        return self.repository.saves[self.external_selected]

    def _name_taken(self, name: str) -> bool:
        return any(s.name == name for s in self.repository.saves)

    # ── Refresh ──

    def try_refresh(self) -> bool:
        if self.repository is None:
            return False
        try:
            self.repository.refresh()
        except NineSavesError as e:
            logger.error(f"Refresh failed: {e}")
            self.error_status = str(e)
            return False

        self.error_status = None
        if self.slot_selected is not None and self.slot_selected >= len(self.repository.slots):
            self.slot_selected = None
        if self.external_selected is not None and self.external_selected >= len(self.repository.saves):
            self.external_selected = None
        return True

    # ── Actions ──

    def action_ready(self) -> bool:
        if self.repository is None:
            return False
        slot = self.selected_slot
        save = self.selected_save
        action = self.action_selected
        if action is Action.SAVE_SLOT_TO_NEW_EXTERNAL:
            return (
                slot is not None
                and slot.exists
                and is_valid_save_name(self.new_save_name)
                and not self._name_taken(self.new_save_name)
            )
        if action is Action.WRITE_SLOT_TO_EXTERNAL:
            return slot is not None and slot.exists and save is not None
        if action is Action.WRITE_EXTERNAL_TO_SLOT:
            return slot is not None and save is not None
        if action is Action.DELETE_EXTERNAL:
            return save is not None
        return False

    def perform(self) -> bool:
        """Run the selected action, then refresh. Returns True on success."""
        if not self.action_ready():
            return False

        action = self.action_selected
        error: str | None = None
        try:
            self._dispatch(action)
        except (NineSavesError, ValueError) as e:
            logger.error(f"Action {action} failed: {e}")
            error = str(e)

        self.try_refresh()
        if error is not None:
            self.error_status = error
        return error is None

    def _dispatch(self, action: Action) -> None:
        repo = self.repository
        engine = self.engine
        slot = self.selected_slot
        save = self.selected_save
        backup_count = len(repo.backups)

        logger.info(f"Performing {action}")
        if action is Action.SAVE_SLOT_TO_NEW_EXTERNAL:
            engine.copy(slot, repo.saves_root / self.new_save_name)
        elif action is Action.WRITE_EXTERNAL_TO_SLOT:
            engine.backup_and_overwrite(save, slot, backup_count)
        elif action is Action.WRITE_SLOT_TO_EXTERNAL:
            engine.backup_and_overwrite(slot, save, backup_count)
        elif action is Action.DELETE_EXTERNAL:
            engine.backup_and_delete(save, backup_count)
            engine.delete_dir(save)
            self.external_selected = None
