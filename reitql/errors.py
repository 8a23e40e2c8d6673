"""Error taxonomy shared by the query composition and batched resolution layers."""
from __future__ import annotations

from typing import Any, Optional


class ReitQLError(Exception):
    """Base class for all reitql errors."""


class InvalidIdentifier(ReitQLError, ValueError):
    """An external identifier could not be parsed into its internal key type."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid identifier for '{field}': {value!r}")


class IncompleteRangeSpec(ReitQLError, ValueError):
    """A bounded condition was supplied with only some of its bounds."""

    def __init__(self, field: str, missing: list[str]):
        self.field = field
        self.missing = list(missing)
        super().__init__(f"'{field}' requires all bounds; missing: {', '.join(self.missing)}")


class InvalidLimit(ReitQLError, ValueError):
    def __init__(self, limit: Any, offset: Any = 0, reason: Optional[str] = None):
        self.limit = limit
        self.offset = offset
        super().__init__(reason or f"Invalid pagination (offset={offset!r}, limit={limit!r})")


class InconsistentKeyState(ReitQLError):
    """A row loaded for a key lacks a field the key type requires."""

    def __init__(self, loader: str, key: Any, detail: str):
        self.loader = loader
        self.key = key
        super().__init__(f"{loader}: inconsistent data for key {key!r}: {detail}")


class StorageUnavailable(ReitQLError):
    """The storage collaborator failed; not retried at this layer."""


__all__ = [
    'ReitQLError',
    'InvalidIdentifier',
    'IncompleteRangeSpec',
    'InvalidLimit',
    'InconsistentKeyState',
    'StorageUnavailable',
]
