from __future__ import annotations

from collections.abc import Iterable, Sequence

DEFAULT_SEED_SIZE = 4


class SelectionState:
    """Ordered set of visible categories, e.g. the epics shown in the focus chart."""

    def __init__(
        self,
        selected: Iterable[str] = (),
        seed_size: int = DEFAULT_SEED_SIZE,
    ) -> None:
        self.seed_size = seed_size
        self._selected: list[str] = []
        for key in selected:
            if key not in self._selected:
                self._selected.append(key)
        self._observed: frozenset[str] | None = None

    @property
    def selected(self) -> list[str]:
        return list(self._selected)

    def __contains__(self, key: object) -> bool:
        return key in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def toggle(self, key: str) -> bool:
        """Flip ``key`` in or out of the selection; returns whether it is now selected."""
        if key in self._selected:
            self._selected.remove(key)
            return False
        self._selected.append(key)
        return True

    def reseed(self, available: Sequence[str]) -> list[str]:
        available_set = set(available)
        if not available_set:
            self._selected = []
            return self.selected

        filtered = [key for key in self._selected if key in available_set]
        if filtered:
            self._selected = filtered
        else:
            self._selected = list(available[: min(self.seed_size, len(available))])
        return self.selected

    def observe(self, available: Sequence[str]) -> list[str]:
        """Reseed only when the category set itself changed since the last call."""
        categories = frozenset(available)
        if categories != self._observed:
            self._observed = categories
            self.reseed(available)
        return self.selected
