"""Save entity model — one slot, external save or backup directory."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from nine_saves.core.metadata_codec import read_metadata
from nine_saves.errors import DecodeError
from nine_saves.models.save_info import MetadataStatus, SaveMetadata

SLOT_COUNT = 4

# Matched against the end of the directory name: saveslot0 .. saveslot3,
# optionally with the before-no-return-point suffix.
SLOT_PATTERN = re.compile(r"saveslot([0-3])(_BeforeNoReturnPoint)?$")


def slot_display_name(index: int, nrp_backup: bool) -> str:
    name = f"Slot {index + 1}"
    return f"{name} (Before NRP)" if nrp_backup else name


def slot_dir_name(index: int) -> str:
    return f"saveslot{index}"


@dataclass(frozen=True)
class SaveEntity:
    """A named, path-addressed save with optional decoded metadata."""

    name: str
    path: Path
    nrp_backup: bool = False
    exists: bool = True
    info: SaveMetadata | None = None
    status: MetadataStatus = MetadataStatus.MISSING
    error: str = ""
    slot_index: int | None = None

    @property
    def decoded(self) -> bool:
        return self.status is MetadataStatus.DECODED

    # ── Constructors ──

    @classmethod
    def load(
        cls,
        name: str,
        path: Path,
        nrp_backup: bool = False,
        slot_index: int | None = None,
    ) -> SaveEntity:
        """Build an entity for an existing directory and decode its metadata.

        Never raises for a decode failure; the outcome is carried in
        ``status``/``error`` so the caller can apply its own policy.
        """
        try:
            info = read_metadata(path)
        except DecodeError as e:
            return cls(
                name=name,
                path=path,
                nrp_backup=nrp_backup,
                status=MetadataStatus.DECODE_FAILED,
                error=e.reason,
                slot_index=slot_index,
            )
        return cls(
            name=name,
            path=path,
            nrp_backup=nrp_backup,
            info=info,
            status=MetadataStatus.DECODED,
            slot_index=slot_index,
        )

    @classmethod
    def from_slot_dir(cls, path: Path) -> SaveEntity | None:
        """Build a slot entity, or None if the directory name is not a slot."""
        match = SLOT_PATTERN.search(path.name)
        if match is None:
            return None
        index = int(match.group(1))
        nrp_backup = match.group(2) is not None
        return cls.load(slot_display_name(index, nrp_backup), path, nrp_backup, index)

    @classmethod
    def placeholder(cls, slots_root: Path, index: int) -> SaveEntity:
        """Stand-in for a canonical slot that has nothing on disk."""
        return cls(
            name=slot_display_name(index, False),
            path=slots_root / slot_dir_name(index),
            exists=False,
            slot_index=index,
        )
