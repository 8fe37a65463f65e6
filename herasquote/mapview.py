"""Interactive map capability set and its in-memory model.

The browser draws the map with Leaflet from :meth:`MapView.snapshot`
and reports clicks and marker drops back, which are dispatched to the
registered handlers through :meth:`MapView.click` / :meth:`MapView.drag_end`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Optional, Protocol

from herasquote.errors import MapLibraryLoadFailure
from herasquote.schemas import MapSnapshot

logger = logging.getLogger(__name__)

LatLon = tuple[float, float]
MapHandler = Callable[[float, float], Awaitable[None]]


class MapProvider(Protocol):
    def initialize(self, center: LatLon, zoom: int) -> None: ...

    def set_view(self, center: LatLon, zoom: int) -> None: ...

    def add_marker(self, position: LatLon, draggable: bool = True) -> None: ...

    def remove_marker(self) -> None: ...

    def on_map_click(self, handler: MapHandler) -> None: ...

    def on_marker_drag_end(self, handler: MapHandler) -> None: ...

    def invalidate_size(self) -> None: ...


class MapView:
    """Server-side map model implementing :class:`MapProvider`."""

    def __init__(self) -> None:
        self.initialized = False
        self.center: Optional[LatLon] = None
        self.zoom: Optional[int] = None
        self.marker: Optional[LatLon] = None
        self.marker_draggable = False
        self.size_invalidations = 0
        self._click_handlers: list[MapHandler] = []
        self._drag_end_handler: Optional[MapHandler] = None

    def initialize(self, center: LatLon, zoom: int) -> None:
        if self.initialized:
            raise RuntimeError("Map already initialized")
        self.initialized = True
        self.center = center
        self.zoom = zoom

    def set_view(self, center: LatLon, zoom: int) -> None:
        self.center = center
        self.zoom = zoom

    def add_marker(self, position: LatLon, draggable: bool = True) -> None:
        self.marker = position
        self.marker_draggable = draggable

    def remove_marker(self) -> None:
        # Drag handlers belong to the marker
        self.marker = None
        self.marker_draggable = False
        self._drag_end_handler = None

    def on_map_click(self, handler: MapHandler) -> None:
        self._click_handlers.append(handler)

    def on_marker_drag_end(self, handler: MapHandler) -> None:
        self._drag_end_handler = handler

    def invalidate_size(self) -> None:
        self.size_invalidations += 1

    async def click(self, lat: float, lon: float) -> None:
        for handler in list(self._click_handlers):
            await handler(lat, lon)

    async def drag_end(self, lat: float, lon: float) -> None:
        if self.marker is None or self._drag_end_handler is None:
            logger.debug("Drag end at (%s, %s) ignored: no marker", lat, lon)
            return
        self.marker = (lat, lon)
        await self._drag_end_handler(lat, lon)

    def snapshot(self) -> MapSnapshot:
        return MapSnapshot(
            initialized=self.initialized,
            center=self.center,
            zoom=self.zoom,
            marker=self.marker,
            marker_draggable=self.marker_draggable,
        )


def default_map_factory(enabled: bool = True) -> Callable[[], MapView]:
    """Build a map factory; a disabled map behaves like a failed library load."""

    def factory() -> MapView:
        if not enabled:
            raise MapLibraryLoadFailure("Map rendering is disabled")
        return MapView()

    return factory


__all__ = ["LatLon", "MapHandler", "MapProvider", "MapView", "default_map_factory"]
