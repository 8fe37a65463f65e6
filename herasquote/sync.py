"""Keeps the postcode field and the map marker consistent.

Forward flow (postcode edit)::

    idle --edit--> resolving --hit--> resolved
                             --miss/failure--> error

Every edit takes a new generation token. Only the request holding the
latest token may commit; anything that finishes after being superseded
is discarded (last request wins, not last response).

Marker flow (click / drag end) reverse-geocodes the position and, when
the postcode found there differs from the field, feeds it back into the
forward flow. Equal postcodes stop the loop.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from herasquote.errors import (
    FETCH_FAILED_MESSAGE,
    MAP_LOAD_FAILED_MESSAGE,
    NOT_FOUND_MESSAGE,
    LookupEmpty,
    MapLibraryLoadFailure,
    TransportFailure,
)
from herasquote.geocoding import Geocoder
from herasquote.mapview import MapProvider
from herasquote.schemas import GeoPoint, MapSnapshot, SyncSnapshot, SyncStatus
from herasquote.wind import normalise_postcode

logger = logging.getLogger(__name__)

PostcodeSink = Callable[[str], Awaitable[None]]

DEFAULT_ZOOM = 14


class GeocodeSynchronizer:
    """Two-way sync between a postcode value and an interactive map.

    Parameters
    ----------
    geocoder : Geocoder
        Forward/reverse geocoding service.
    map_factory : callable
        Creates the map on the first successful lookup. May raise
        :class:`MapLibraryLoadFailure`; creation is retried on the next
        successful lookup.
    zoom : int
        Zoom level used when centring on a resolved postcode.
    on_postcode : async callable, optional
        Receives postcodes found by reverse geocoding. Owners of the
        postcode field (the quote session) pass their own setter here so
        the field and everything derived from it update together.
        Defaults to :meth:`set_postcode`.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        map_factory: Callable[[], MapProvider],
        *,
        zoom: int = DEFAULT_ZOOM,
        on_postcode: Optional[PostcodeSink] = None,
    ):
        self.geocoder = geocoder
        self.zoom = zoom
        self.on_postcode = on_postcode
        self.map: Optional[MapProvider] = None
        self.postcode = ""
        self.status: SyncStatus = "idle"
        self.geo: Optional[GeoPoint] = None
        self.error = ""
        self._map_factory = map_factory
        self._generation = 0
        self._marker_generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    # ── Forward flow ────────────────────────────────────────────────

    async def set_postcode(self, value: str) -> bool:
        """Resolve a new postcode value.

        Returns False when nothing was committed: the value was unchanged,
        or a newer edit superseded this one while it was in flight.
        """
        value = value or ""
        if value == self.postcode:
            return False

        self.postcode = value
        self._generation += 1
        token = self._generation

        cleaned = normalise_postcode(value)
        if not cleaned:
            self.status = "idle"
            self.geo = None
            self.error = ""
            return True

        self.status = "resolving"
        self.error = ""
        logger.debug("Resolving %r (generation %d)", cleaned, token)

        try:
            candidates = await self.geocoder.forward(cleaned)
        except LookupEmpty:
            candidates = []
        except TransportFailure as exc:
            if self._superseded(token, cleaned):
                return False
            logger.info("Geocode transport failure for %r: %s", cleaned, exc)
            self._fail(FETCH_FAILED_MESSAGE)
            return True

        if self._superseded(token, cleaned):
            return False

        if not candidates:
            logger.info("No location found for %r", cleaned)
            self._fail(NOT_FOUND_MESSAGE)
            return True

        hit = candidates[0]
        self.geo = GeoPoint(
            latitude=hit.latitude,
            longitude=hit.longitude,
            display_name=hit.display_name,
        )
        self.status = "resolved"
        self.error = ""
        self._show(hit.latitude, hit.longitude)
        return True

    def _superseded(self, token: int, cleaned: str) -> bool:
        if token != self._generation:
            logger.debug(
                "Discarding stale result for %r (generation %d, current %d)",
                cleaned,
                token,
                self._generation,
            )
            return True
        return False

    def _fail(self, message: str) -> None:
        self.status = "error"
        self.geo = None
        self.error = message

    def _show(self, lat: float, lon: float) -> None:
        center = (lat, lon)
        if self.map is None:
            try:
                map_ = self._map_factory()
                map_.initialize(center, self.zoom)
            except MapLibraryLoadFailure as exc:
                logger.warning("Map library unavailable: %s", exc)
                self.error = MAP_LOAD_FAILED_MESSAGE
                return
            map_.on_map_click(self.handle_map_click)
            self.map = map_
        else:
            self.map.set_view(center, self.zoom)
        self.map.invalidate_size()
        self._place_marker(lat, lon)

    def _place_marker(self, lat: float, lon: float) -> None:
        assert self.map is not None
        self.map.remove_marker()
        self.map.add_marker((lat, lon), draggable=True)
        self.map.on_marker_drag_end(self.handle_marker_drag_end)

    # ── Marker flow ─────────────────────────────────────────────────

    async def handle_map_click(self, lat: float, lon: float) -> None:
        if self.map is None:
            return
        self._place_marker(lat, lon)
        await self._reverse(lat, lon)

    async def handle_marker_drag_end(self, lat: float, lon: float) -> None:
        await self._reverse(lat, lon)

    async def _reverse(self, lat: float, lon: float) -> None:
        self._marker_generation += 1
        token = (self._generation, self._marker_generation)

        try:
            found = await self.geocoder.reverse(lat, lon)
        except TransportFailure as exc:
            # Marker stays put; nothing is surfaced
            logger.debug("Reverse geocode failed at (%s, %s): %s", lat, lon, exc)
            return

        if token != (self._generation, self._marker_generation):
            logger.debug("Discarding stale reverse result %r", found)
            return
        if not found:
            return
        if normalise_postcode(found) == normalise_postcode(self.postcode):
            return

        logger.info("Marker moved to postcode %s", found)
        sink = self.on_postcode or self.set_postcode
        await sink(found)

    # ── Views ───────────────────────────────────────────────────────

    def snapshot(self) -> SyncSnapshot:
        map_snapshot = self.map.snapshot() if hasattr(self.map, "snapshot") else MapSnapshot()
        return SyncSnapshot(
            postcode=self.postcode,
            status=self.status,
            geo=self.geo,
            error=self.error,
            generation=self._generation,
            map=map_snapshot,
        )


__all__ = ["DEFAULT_ZOOM", "GeocodeSynchronizer", "PostcodeSink"]
