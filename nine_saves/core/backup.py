"""Backup engine — copy, delete and backup-before-overwrite for save directories.

Composite operations are built as a plan of steps and then executed in
order. Backup always precedes delete and delete always precedes the new
copy, so an interruption can leave a destination empty but never without
a backup of what it held. Every step is safe to run again.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from loguru import logger

from nine_saves.errors import SaveIOError
from nine_saves.models.save_entity import SaveEntity


class StepKind(StrEnum):
    BACKUP = "backup"
    DELETE = "delete"
    COPY = "copy"


@dataclass(frozen=True)
class ProtocolStep:
    """One step of a destructive operation.

    ``BACKUP`` and ``COPY`` copy ``entity``'s files into ``target``;
    ``DELETE`` empties ``entity``'s directory.
    """

    kind: StepKind
    entity: SaveEntity
    target: Path | None = None

    def describe(self) -> str:
        if self.kind is StepKind.DELETE:
            return f"delete contents of '{self.entity.name}'"
        return f"{self.kind} '{self.entity.name}' to {self.target}"


class BackupEngine:
    """Filesystem actions on SaveEntity values. Holds no repository state."""

    def __init__(self, backups_root: Path) -> None:
        self.backups_root = backups_root

    # ── Primitives ──

    def copy(self, source: SaveEntity, destination: Path) -> None:
        """Copy the regular files directly inside ``source.path`` into *destination*.

        Subdirectories of the source are not copied.
        """
        try:
            destination.mkdir(parents=True, exist_ok=True)
            count = 0
            for entry in source.path.iterdir():
                if entry.is_file():
                    shutil.copy2(entry, destination / entry.name)
                    count += 1
        except OSError as e:
            logger.error(f"Copy of '{source.name}' to {destination} failed: {e}")
            raise SaveIOError("copy", source.name, source.path, str(e)) from e
        logger.info(f"Copied {count} file(s) from '{source.name}' to {destination}")

    def delete(self, entity: SaveEntity) -> None:
        """Remove the regular files directly inside ``entity.path``; keep the directory."""
        try:
            count = 0
            for entry in entity.path.iterdir():
                if entry.is_file():
                    entry.unlink()
                    count += 1
        except OSError as e:
            logger.error(f"Delete of '{entity.name}' failed: {e}")
            raise SaveIOError("delete", entity.name, entity.path, str(e)) from e
        logger.info(f"Deleted {count} file(s) from '{entity.name}'")

    def delete_dir(self, entity: SaveEntity) -> None:
        """Remove the (empty) directory of *entity*. Fails if it is not empty."""
        try:
            entity.path.rmdir()
        except OSError as e:
            logger.error(f"Removing directory of '{entity.name}' failed: {e}")
            raise SaveIOError("delete directory", entity.name, entity.path, str(e)) from e
        logger.info(f"Removed directory {entity.path}")

    # ── Planning ──

    def backup_path(self, entity: SaveEntity, backup_count: int) -> Path:
        """Directory for a new backup of *entity*: ``{count}_{name}``.

        The index is bumped past any name already taken so an existing
        backup is never written into.
        """
        index = backup_count
        path = self.backups_root / f"{index}_{entity.name}"
        while path.exists():
            index += 1
            path = self.backups_root / f"{index}_{entity.name}"
        if index != backup_count:
            logger.warning(f"Backup index {backup_count} for '{entity.name}' taken, using {index}")
        return path

    def has_files(self, entity: SaveEntity) -> bool:
        """True if ``entity.path`` is a directory holding at least one regular file.

        Decided from the disk, not ``entity.exists``: a slot whose metadata
        failed to decode is shown as a placeholder but still holds files.
        """
        if not entity.path.is_dir():
            return False
        try:
            return any(entry.is_file() for entry in entity.path.iterdir())
        except OSError as e:
            raise SaveIOError("scan", entity.name, entity.path, str(e)) from e

    def plan_backup_and_delete(self, entity: SaveEntity, backup_count: int) -> list[ProtocolStep]:
        if not self.has_files(entity):
            return []
        if not entity.exists:
            logger.warning(f"'{entity.name}' is listed as empty but {entity.path} holds files")
        return [
            ProtocolStep(StepKind.BACKUP, entity, self.backup_path(entity, backup_count)),
            ProtocolStep(StepKind.DELETE, entity),
        ]

    def plan_backup_and_overwrite(
        self,
        source: SaveEntity,
        destination: SaveEntity,
        backup_count: int,
    ) -> list[ProtocolStep]:
        if source.path.resolve() == destination.path.resolve():
            raise ValueError(f"Cannot overwrite '{destination.name}' with itself")
        steps = self.plan_backup_and_delete(destination, backup_count)
        steps.append(ProtocolStep(StepKind.COPY, source, destination.path))
        return steps

    # ── Execution ──

    def run_step(self, step: ProtocolStep) -> None:
        logger.info(f"Step: {step.describe()}")
        if step.kind is StepKind.DELETE:
            self.delete(step.entity)
        else:
            self.copy(step.entity, step.target)

    def execute(self, steps: list[ProtocolStep]) -> None:
        """Run *steps* in order, stopping at the first failure."""
        for step in steps:
            self.run_step(step)

    # ── Composites ──

    def backup_and_delete(self, entity: SaveEntity, backup_count: int) -> None:
        """Back up *entity* as ``{backup_count}_{name}``, then empty its directory."""
        self.execute(self.plan_backup_and_delete(entity, backup_count))

    def backup_and_overwrite(
        self,
        source: SaveEntity,
        destination: SaveEntity,
        backup_count: int,
    ) -> None:
        """Back up and empty *destination*, then copy *source*'s files into it."""
        self.execute(self.plan_backup_and_overwrite(source, destination, backup_count))
