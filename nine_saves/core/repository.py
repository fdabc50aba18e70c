"""Save repository — scan slots, external saves and backups into one model."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from nine_saves.errors import DecodeError, DirectoryUnavailable, SaveIOError
from nine_saves.models.save_entity import SLOT_COUNT, SaveEntity
from nine_saves.models.save_info import DecodePolicy


class SaveRepository:
    """
    In-memory view of the three save roots.

    ``refresh()`` rebuilds ``slots``, ``saves`` and ``backups`` from disk and
    swaps them in together; the sequences are tuples, so callers can only
    observe them. Entities are transient and must not be held across a
    refresh.
    """

    def __init__(
        self,
        slots_root: Path,
        saves_root: Path,
        backups_root: Path,
        slot_policy: DecodePolicy = DecodePolicy.SKIP,
        save_policy: DecodePolicy = DecodePolicy.FAIL,
    ) -> None:
        self.slots_root = slots_root
        self.saves_root = saves_root
        self.backups_root = backups_root
        self.slot_policy = slot_policy
        self.save_policy = save_policy
        self._slots: tuple[SaveEntity, ...] = ()
        self._saves: tuple[SaveEntity, ...] = ()
        self._backups: tuple[SaveEntity, ...] = ()

    @property
    def slots(self) -> tuple[SaveEntity, ...]:
        return self._slots

    @property
    def saves(self) -> tuple[SaveEntity, ...]:
        return self._saves

    @property
    def backups(self) -> tuple[SaveEntity, ...]:
        return self._backups

    def refresh(self) -> None:
        """Re-derive all three sequences. On failure the previous state is kept."""
        slots = self._scan_slots()
        saves = self._scan_directory(self.saves_root)
        backups = self._scan_directory(self.backups_root)

        self._slots = _sorted(slots)
        self._saves = _sorted(saves)
        self._backups = _sorted(backups)
        logger.info(
            f"Refreshed: {sum(s.exists for s in slots)}/{SLOT_COUNT} slots, "
            f"{len(saves)} save(s), {len(backups)} backup(s)"
        )

    # ── Scanning ──

    def _scan_slots(self) -> list[SaveEntity]:
        if not self.slots_root.is_dir():
            raise DirectoryUnavailable(
                f"Game save directory not found: {self.slots_root}", self.slots_root
            )

        by_index: dict[int, SaveEntity] = {}
        for entry in _list_dir(self.slots_root, "scan slots"):
            if not entry.is_dir():
                continue
            entity = SaveEntity.from_slot_dir(entry)
            if entity is None:
                continue
            entity = self._apply_policy(entity, self.slot_policy)
            if entity is None:
                continue
            index = entity.slot_index
            current = by_index.get(index)
            if current is None or _prefer(entity, current):
                if current is not None:
                    logger.debug(f"{entity.name} replaces {current.name} for slot index {index}")
                by_index[index] = entity

        for index in range(SLOT_COUNT):
            if index not in by_index:
                by_index[index] = SaveEntity.placeholder(self.slots_root, index)

        return list(by_index.values())

    def _scan_directory(self, root: Path) -> list[SaveEntity]:
        """One entity per immediate subdirectory of *root*, created if absent."""
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SaveIOError("create directory", root.name, root, str(e)) from e

        entities: list[SaveEntity] = []
        for entry in _list_dir(root, "scan"):
            if not entry.is_dir():
                continue
            entity = self._apply_policy(SaveEntity.load(entry.name, entry), self.save_policy)
            if entity is not None:
                entities.append(entity)
        return entities

    def _apply_policy(self, entity: SaveEntity, policy: DecodePolicy) -> SaveEntity | None:
        if entity.decoded:
            return entity
        if policy is DecodePolicy.FAIL:
            logger.error(f"Cannot decode '{entity.name}' at {entity.path}: {entity.error}")
            raise DecodeError(entity.error, save_name=entity.name)
        if policy is DecodePolicy.SKIP:
            logger.warning(f"Skipping '{entity.name}': {entity.error}")
            return None
        return entity


def _list_dir(root: Path, operation: str) -> list[Path]:
    try:
        return list(root.iterdir())
    except OSError as e:
        raise SaveIOError(operation, root.name, root, str(e)) from e


def _prefer(candidate: SaveEntity, current: SaveEntity) -> bool:
    """The live slot wins over its before-NRP variant; decoded wins over failed."""
    if candidate.decoded != current.decoded:
        return candidate.decoded
    if candidate.nrp_backup != current.nrp_backup:
        return not candidate.nrp_backup
    # Same kind twice (e.g. "saveslot0" and "old_saveslot0"): keep a stable pick
    return candidate.path.name < current.path.name


def _sorted(entities: list[SaveEntity]) -> tuple[SaveEntity, ...]:
    # str order is code point order, which matches UTF-8 byte order
    return tuple(sorted(entities, key=lambda e: (e.name, e.path.name)))
