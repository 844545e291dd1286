"""Tile lifecycle states and the atomic outcome record."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class TileState(str, Enum):
    """Tile state: New -> Loading -> (Loaded | Canceled)."""

    # New tile, not yet initialized
    NEW = 'new'
    # Loading data
    LOADING = 'loading'
    # Data arrived (check error: a failed fetch or parse is still "loaded")
    LOADED = 'loaded'
    # Data loading cancelled
    CANCELED = 'canceled'


@dataclass(frozen=True)
class TileOutcome:
    """
    State, decoded content and last error of a tile, swapped as one value.

    Readers get a consistent snapshot: a LOADED outcome always carries the
    error (or None) of the attempt that produced it.
    """

    state: TileState = TileState.NEW
    content: Any = None
    error: str | None = None

    @classmethod
    def loaded(cls, content: Any = None, error: str | None = None) -> TileOutcome:
        return cls(TileState.LOADED, content, error)

    def moved_to(self, state: TileState) -> TileOutcome:
        """Same content and error, different state."""
        return replace(self, state=state)

    def with_error(self, error: str | None) -> TileOutcome:
        return replace(self, error=error)

    @property
    def is_terminal(self) -> bool:
        return self.state in (TileState.LOADED, TileState.CANCELED)
