"""Tests for the BackupEngine."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from nine_saves.core.backup import BackupEngine, StepKind
from nine_saves.errors import SaveIOError
from nine_saves.models.save_entity import SaveEntity
from tests.samples import LATE_GAME_META, make_save_dir, read_files


@pytest.fixture
def engine(tmp_path: Path) -> BackupEngine:
    root = tmp_path / "backups"
    root.mkdir()
    return BackupEngine(root)


@pytest.fixture
def slot(tmp_path: Path) -> SaveEntity:
    path = make_save_dir(
        tmp_path / "NineSols",
        "saveslot0",
        files={"flags.txt": b"slot flags", "save.dat": b"slot data"},
    )
    return SaveEntity.load("Slot 1", path, slot_index=0)


@pytest.fixture
def external(tmp_path: Path) -> SaveEntity:
    path = make_save_dir(
        tmp_path / "saves",
        "before boss",
        meta=LATE_GAME_META,
        files={"save.dat": b"external data"},
    )
    return SaveEntity.load("before boss", path)


class TestCopy:
    def test_copies_files(self, engine: BackupEngine, slot: SaveEntity, tmp_path: Path) -> None:
        before = read_files(slot.path)
        dest = tmp_path / "out" / "nested" / "copy"
        engine.copy(slot, dest)

        assert read_files(dest) == before
        assert read_files(slot.path) == before

    def test_copy_is_shallow(self, engine: BackupEngine, slot: SaveEntity, tmp_path: Path) -> None:
        (slot.path / "sub").mkdir()
        (slot.path / "sub" / "deep.dat").write_bytes(b"deep")
        dest = tmp_path / "copy"
        engine.copy(slot, dest)

        assert not (dest / "sub").exists()
        assert not (dest / "deep.dat").exists()

    def test_missing_source(self, engine: BackupEngine, tmp_path: Path) -> None:
        ghost = SaveEntity(name="ghost", path=tmp_path / "ghost")
        with pytest.raises(SaveIOError) as exc:
            engine.copy(ghost, tmp_path / "dest")
        assert exc.value.operation == "copy"
        assert exc.value.save_name == "ghost"


class TestDelete:
    def test_delete_keeps_directory(self, engine: BackupEngine, slot: SaveEntity) -> None:
        engine.delete(slot)
        assert slot.path.is_dir()
        assert read_files(slot.path) == {}

    def test_delete_leaves_subdirectories(self, engine: BackupEngine, slot: SaveEntity) -> None:
        (slot.path / "sub").mkdir()
        engine.delete(slot)
        assert (slot.path / "sub").is_dir()

    def test_delete_dir_requires_empty(self, engine: BackupEngine, slot: SaveEntity) -> None:
        with pytest.raises(SaveIOError, match="delete directory"):
            engine.delete_dir(slot)
        engine.delete(slot)
        engine.delete_dir(slot)
        assert not slot.path.exists()


class TestBackupAndDelete:
    def test_backup_named_after_count(self, engine: BackupEngine, slot: SaveEntity) -> None:
        before = read_files(slot.path)
        engine.backup_and_delete(slot, 3)

        backup = engine.backups_root / "3_Slot 1"
        assert read_files(backup) == before
        assert read_files(slot.path) == {}

    def test_taken_index_is_bumped(self, engine: BackupEngine, slot: SaveEntity) -> None:
        make_save_dir(engine.backups_root, "0_Slot 1", files={"old.dat": b"old"})
        engine.backup_and_delete(slot, 0)

        assert read_files(engine.backups_root / "0_Slot 1")["old.dat"] == b"old"
        assert (engine.backups_root / "1_Slot 1" / "save.dat").read_bytes() == b"slot data"

    def test_placeholder_is_noop(self, engine: BackupEngine, tmp_path: Path) -> None:
        placeholder = SaveEntity.placeholder(tmp_path, 2)
        assert engine.plan_backup_and_delete(placeholder, 0) == []
        engine.backup_and_delete(placeholder, 0)
        assert list(engine.backups_root.iterdir()) == []


class TestBackupAndOverwrite:
    def test_overwrite(
        self, engine: BackupEngine, slot: SaveEntity, external: SaveEntity
    ) -> None:
        source_files = read_files(external.path)
        dest_files = read_files(slot.path)
        engine.backup_and_overwrite(external, slot, 0)

        # flags.txt only existed in the slot, so it is gone now
        assert read_files(slot.path) == source_files
        assert read_files(engine.backups_root / "0_Slot 1") == dest_files
        assert read_files(external.path) == source_files

    def test_overwrite_placeholder_slot(
        self, engine: BackupEngine, external: SaveEntity, tmp_path: Path
    ) -> None:
        placeholder = SaveEntity.placeholder(tmp_path / "NineSols", 1)
        steps = engine.plan_backup_and_overwrite(external, placeholder, 0)
        assert [s.kind for s in steps] == [StepKind.COPY]

        engine.execute(steps)
        assert read_files(placeholder.path) == read_files(external.path)

    def test_overwrite_slot_with_unreadable_metadata(
        self, engine: BackupEngine, external: SaveEntity, tmp_path: Path
    ) -> None:
        slots_root = tmp_path / "NineSols"
        make_save_dir(slots_root, "saveslot1", meta="garbage", files={"save.dat": b"PRECIOUS"})
        # What the scan reports for a slot it could not decode
        placeholder = SaveEntity.placeholder(slots_root, 1)
        steps = engine.plan_backup_and_overwrite(external, placeholder, 0)
        assert [s.kind for s in steps] == [StepKind.BACKUP, StepKind.DELETE, StepKind.COPY]

        engine.execute(steps)
        backup = read_files(engine.backups_root / "0_Slot 2")
        assert backup == {"meta.txt": b"garbage", "save.dat": b"PRECIOUS"}
        assert read_files(placeholder.path) == read_files(external.path)

    def test_overwrite_empty_directory_skips_backup(
        self, engine: BackupEngine, external: SaveEntity, tmp_path: Path
    ) -> None:
        placeholder = SaveEntity.placeholder(tmp_path / "NineSols", 3)
        placeholder.path.mkdir(parents=True)
        steps = engine.plan_backup_and_overwrite(external, placeholder, 0)
        assert [s.kind for s in steps] == [StepKind.COPY]

    def test_same_path_rejected(self, engine: BackupEngine, slot: SaveEntity) -> None:
        with pytest.raises(ValueError):
            engine.backup_and_overwrite(slot, slot, 0)
        assert (slot.path / "save.dat").exists()

    def test_plan_order(
        self, engine: BackupEngine, slot: SaveEntity, external: SaveEntity
    ) -> None:
        steps = engine.plan_backup_and_overwrite(external, slot, 7)
        assert [s.kind for s in steps] == [StepKind.BACKUP, StepKind.DELETE, StepKind.COPY]
        assert steps[0].target == engine.backups_root / "7_Slot 1"
        assert steps[2].target == slot.path


class TestInterruption:
    @pytest.mark.parametrize("completed", [1, 2])
    def test_backup_exists_after_partial_run(
        self,
        engine: BackupEngine,
        slot: SaveEntity,
        external: SaveEntity,
        completed: int,
    ) -> None:
        dest_files = read_files(slot.path)
        steps = engine.plan_backup_and_overwrite(external, slot, 0)
        engine.execute(steps[:completed])

        assert read_files(engine.backups_root / "0_Slot 1") == dest_files
        if completed == 2:
            assert read_files(slot.path) == {}

    def test_resume_by_rerunning_steps(
        self, engine: BackupEngine, slot: SaveEntity, external: SaveEntity
    ) -> None:
        dest_files = read_files(slot.path)
        steps = engine.plan_backup_and_overwrite(external, slot, 0)
        engine.execute(steps[:2])
        # Every step is safe to repeat
        engine.execute(steps)

        assert read_files(slot.path) == read_files(external.path)
        assert read_files(engine.backups_root / "0_Slot 1") == dest_files

    def test_failed_copy_leaves_backup(
        self, engine: BackupEngine, slot: SaveEntity, external: SaveEntity
    ) -> None:
        dest_files = read_files(slot.path)
        real_copy = engine.copy

        def copy(source: SaveEntity, destination: Path) -> None:
            if source is external:
                raise SaveIOError("copy", source.name, source.path, "disk full")
            real_copy(source, destination)

        with patch.object(engine, "copy", side_effect=copy):
            with pytest.raises(SaveIOError, match="disk full"):
                engine.backup_and_overwrite(external, slot, 0)

        assert read_files(slot.path) == {}
        assert read_files(engine.backups_root / "0_Slot 1") == dest_files
