"""Linear undo/redo history.

:class:`CommandHistory` keeps ``past``/``present``/``future`` snapshots of a
single value.  Every operation returns a new history and leaves the
receiver untouched, so a layer can swap in the result of ``set``/``undo``/
``redo`` atomically.  Snapshots are deep copies; callers may keep mutating
the value they passed in without corrupting the history.

Avoid calling :meth:`CommandHistory.set` with a value equal to ``present``;
the history does not filter duplicates and the no-op would cost an undo step.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CommandHistory(Generic[T]):
    """Immutable three-part history of ``T`` snapshots."""

    present: T
    past: Tuple[T, ...] = ()
    future: Tuple[T, ...] = ()
    limit: Optional[int] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit <= 0:
            raise ValueError("limit must be greater than zero")

    def set(self, value: T) -> "CommandHistory[T]":
        """Record ``value`` as the new present and drop the redo branch."""

        past = self.past + (self.present,)
        if self.limit is not None and len(past) > self.limit:
            past = past[len(past) - self.limit:]
        return replace(self, past=past, present=copy.deepcopy(value), future=())

    def seed(self, value: T) -> "CommandHistory[T]":
        """Replace ``present`` without recording an undo step.

        Used once, right after a selection is first drawn, so the jump from
        the initial empty selection is not undoable on its own.
        """

        return replace(self, present=copy.deepcopy(value))

    def can_undo(self) -> bool:
        return bool(self.past)

    def can_redo(self) -> bool:
        return bool(self.future)

    def undo(self) -> "CommandHistory[T]":
        """Step back one snapshot; unchanged when there is nothing to undo."""

        if not self.can_undo():
            return self
        return replace(
            self,
            past=self.past[:-1],
            present=self.past[-1],
            future=(self.present,) + self.future,
        )

    def redo(self) -> "CommandHistory[T]":
        """Step forward one snapshot; unchanged when there is nothing to redo."""

        if not self.can_redo():
            return self
        return replace(
            self,
            past=self.past + (self.present,),
            present=self.future[0],
            future=self.future[1:],
        )

    def current(self) -> T:
        """Return a deep copy of ``present`` safe to hand to callers."""

        return copy.deepcopy(self.present)


__all__ = ["CommandHistory"]
