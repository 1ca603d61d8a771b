# src/vita_companion/core/errors.py

from __future__ import annotations


class StorageError(RuntimeError):
    """A store operation failed (database unreachable, write failed, ...)."""


class DataIntegrityError(ValueError):
    """A single stored record is structurally invalid (e.g. missing id)."""


class ModelReplyError(ValueError):
    """The model reply could not be parsed into the expected JSON shape."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw
