"""Ordered selection of up to three card slots."""

from __future__ import annotations

SLOT_COUNT = 9
MAX_SELECTED = 3


class SelectionController:
    def __init__(self) -> None:
        self._selected: list[int] = []
        self._locked = False

    @property
    def selected(self) -> tuple[int, ...]:
        return tuple(self._selected)

    @property
    def is_full(self) -> bool:
        return len(self._selected) >= MAX_SELECTED

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, index: object) -> bool:
        return index in self._selected

    def toggle(self, index: int) -> bool:
        """Select or deselect `index`. Returns True when the selection changed.

        Out-of-range indices, a full selection and a locked controller are
        silent no-ops.
        """
        if self._locked:
            return False
        if not isinstance(index, int) or isinstance(index, bool):
            return False
        if index < 0 or index >= SLOT_COUNT:
            return False
        if index in self._selected:
            self._selected.remove(index)
            return True
        if self.is_full:
            return False
        self._selected.append(index)
        return True

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def clear(self) -> None:
        self._selected.clear()
