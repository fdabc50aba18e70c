"""Error taxonomy shared by the scanner, codec and backup engine."""

from __future__ import annotations

from pathlib import Path


class NineSavesError(Exception):
    """Base class for every failure the host is expected to display."""


class DirectoryUnavailable(NineSavesError):
    """A root directory is missing or the platform save location is unknown."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SaveIOError(NineSavesError):
    """A filesystem step failed; carries the operation and the save involved."""

    def __init__(self, operation: str, save_name: str, path: Path, reason: str) -> None:
        super().__init__(f"{operation} failed for save '{save_name}' at {path}: {reason}")
        self.operation = operation
        self.save_name = save_name
        self.path = path
        self.reason = reason


class DecodeError(NineSavesError):
    """Metadata could not be decoded.

    Raised bare by the codec; the scanner re-raises it with ``save_name``
    set so the message identifies the offending entity.
    """

    def __init__(self, reason: str, save_name: str | None = None) -> None:
        message = reason if save_name is None else f"failed to decode save '{save_name}': {reason}"
        super().__init__(message)
        self.reason = reason
        self.save_name = save_name
