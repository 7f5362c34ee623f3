from __future__ import annotations

from collections.abc import Iterable, Sequence


def color_for(key: str, index: int, palette: Sequence[str]) -> str:
    """Cyclic palette lookup by position; ``key`` does not influence the result."""
    if not palette:
        raise ValueError(f"palette must be non-empty to color {key!r}.")
    return palette[index % len(palette)]


def assign_colors(keys: Iterable[str], palette: Sequence[str]) -> dict[str, str]:
    """Color every key by its position in ``keys``; the first occurrence of a key wins."""
    mapping: dict[str, str] = {}
    for index, key in enumerate(keys):
        if key not in mapping:
            mapping[key] = color_for(key, index, palette)
    return mapping


class ColorTable:
    """Persistent key -> color table shared by every chart showing the same entities.

    A key keeps the color it received the first time it was seen, so later
    lookups with a differently ordered key list still agree.
    """

    def __init__(self, palette: Sequence[str]) -> None:
        if not palette:
            raise ValueError("palette must be non-empty.")
        self._palette = tuple(palette)
        self._colors: dict[str, str] = {}

    @classmethod
    def from_keys(cls, keys: Iterable[str], palette: Sequence[str]) -> ColorTable:
        """Seed the table by list position, matching ``assign_colors`` for the same keys."""
        table = cls(palette)
        table._colors.update(assign_colors(keys, table._palette))
        return table

    @property
    def palette(self) -> tuple[str, ...]:
        return self._palette

    def extend(self, keys: Iterable[str]) -> None:
        """Assign colors to unseen keys, continuing the palette cycle."""
        for key in keys:
            if key not in self._colors:
                self._colors[key] = color_for(key, len(self._colors), self._palette)

    def get(self, key: str) -> str | None:
        return self._colors.get(key)

    def lookup(self, key: str, fallback_index: int) -> str:
        color = self._colors.get(key)
        if color is not None:
            return color
        return color_for(key, fallback_index, self._palette)

    def as_dict(self) -> dict[str, str]:
        return dict(self._colors)

    def __contains__(self, key: object) -> bool:
        return key in self._colors

    def __len__(self) -> int:
        return len(self._colors)
