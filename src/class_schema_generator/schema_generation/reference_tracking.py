"""Tracking of types expanded along the active traversal path."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from .schema_nodes import ROOT_IDENTIFIER


@dataclass(frozen=True)
class ManagedReference:
    """A type currently being expanded, and the identifier of the node expanding it.

    Equality and hashing use the type only.
    """

    type: Any
    identifier: str = field(default=ROOT_IDENTIFIER, compare=False)


class ReferenceTracker:
    """Set of references held by the composite expansions on the active path.

    One tracker belongs to one traversal. Sharing an instance between root types
    shares their cycle suppression.
    """

    def __init__(self) -> None:
        self._active: dict[ManagedReference, ManagedReference] = {}

    def acquire(self, reference: ManagedReference) -> bool:
        """Record ``reference``; return False when its type is already tracked."""
        if reference in self._active:
            return False
        self._active[reference] = reference
        return True

    def release(self, reference: ManagedReference) -> bool:
        """Forget ``reference``; return whether it was tracked."""
        return self._active.pop(reference, None) is not None

    def active_reference(self, type_: Any) -> ManagedReference | None:
        """Return the tracked reference for ``type_``, if any."""
        return self._active.get(ManagedReference(type_))

    @contextmanager
    def hold(self, reference: ManagedReference) -> Iterator[bool]:
        """Acquire ``reference`` for the duration of the block.

        Yields whether it was acquired; only an acquired reference is released.
        """
        acquired = self.acquire(reference)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(reference)

    def __contains__(self, reference: object) -> bool:
        return reference in self._active

    def __len__(self) -> int:
        return len(self._active)
