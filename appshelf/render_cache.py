"""Memoized icon renderings keyed by app index and target cell size."""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

from .icons import RenderedIcon


class CacheKey(NamedTuple):
    app_index: int
    width_cells: int
    height_cells: int


class RenderCache:
    """Full-clear memoization store for rendered icons.

    A key only names a cell footprint; its pixel size depends on the current
    cell pixel dimensions, so any geometry change must ``clear`` the cache.
    There is no eviction beyond that.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, RenderedIcon] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> RenderedIcon | None:
        return self._entries.get(key)

    def put(self, key: CacheKey, payload: RenderedIcon) -> None:
        self._entries[key] = payload

    def clear(self) -> None:
        self._entries.clear()

    def get_or_render(self, key: CacheKey, render: Callable[[], RenderedIcon]) -> RenderedIcon:
        cached = self._entries.get(key)
        if cached is not None:
            return cached
        rendered = render()
        self._entries[key] = rendered
        return rendered
