"""Tests for the geocode/map synchronizer."""

import asyncio

from herasquote.errors import (
    FETCH_FAILED_MESSAGE,
    MAP_LOAD_FAILED_MESSAGE,
    NOT_FOUND_MESSAGE,
    MapLibraryLoadFailure,
)
from herasquote.mapview import MapView
from herasquote.sync import GeocodeSynchronizer


class CountingMapFactory:
    def __init__(self, fail_first: int = 0):
        self.created: list[MapView] = []
        self.fail_first = fail_first

    def __call__(self) -> MapView:
        if self.fail_first:
            self.fail_first -= 1
            raise MapLibraryLoadFailure("leaflet.js 404")
        map_ = MapView()
        self.created.append(map_)
        return map_


def _sync(geocoder, factory=None):
    return GeocodeSynchronizer(geocoder, factory or CountingMapFactory(), zoom=14)


class TestForwardFlow:
    def test_resolves_postcode_and_places_marker(self, geocoder):
        sync = _sync(geocoder)
        assert asyncio.run(sync.set_postcode("SW4 6QD")) is True

        assert geocoder.forward_calls == ["SW46QD"]
        assert sync.status == "resolved"
        assert sync.error == ""
        assert sync.geo.latitude == 51.4626
        assert sync.geo.display_name.startswith("Clapham")
        assert sync.map.center == (51.4626, -0.1410)
        assert sync.map.zoom == 14
        assert sync.map.marker == (51.4626, -0.1410)
        assert sync.map.marker_draggable

    def test_empty_postcode_is_idle(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.set_postcode(""))

        assert sync.status == "idle"
        assert sync.geo is None
        assert sync.error == ""
        assert geocoder.forward_calls == ["SW46QD"]

    def test_not_found_clears_location(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.set_postcode("ZZ9 9ZZ"))

        assert sync.status == "error"
        assert sync.geo is None
        assert sync.error == NOT_FOUND_MESSAGE

    def test_transport_failure_clears_location(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        geocoder.fail_forward = True
        asyncio.run(sync.set_postcode("B2 2BB"))

        assert sync.status == "error"
        assert sync.geo is None
        assert sync.error == FETCH_FAILED_MESSAGE

    def test_recovers_on_next_edit(self, geocoder):
        sync = _sync(geocoder)
        geocoder.fail_forward = True
        asyncio.run(sync.set_postcode("SW4 6QD"))
        geocoder.fail_forward = False
        asyncio.run(sync.set_postcode("B2 2BB"))

        assert sync.status == "resolved"
        assert sync.geo.display_name.startswith("B2 2BB")

    def test_same_value_is_noop(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        assert asyncio.run(sync.set_postcode("SW4 6QD")) is False
        assert geocoder.forward_calls == ["SW46QD"]

    def test_map_created_once_and_recentred(self, geocoder):
        factory = CountingMapFactory()
        sync = _sync(geocoder, factory)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.set_postcode("B2 2BB"))

        assert len(factory.created) == 1
        assert sync.map.center == (52.4800, -1.8900)
        assert sync.map.marker == (52.4800, -1.8900)
        assert sync.map.size_invalidations == 2

    def test_map_library_failure_keeps_location(self, geocoder):
        factory = CountingMapFactory(fail_first=1)
        sync = _sync(geocoder, factory)
        asyncio.run(sync.set_postcode("SW4 6QD"))

        assert sync.geo is not None
        assert sync.map is None
        assert sync.error == MAP_LOAD_FAILED_MESSAGE

        # Retried on the next lookup
        asyncio.run(sync.set_postcode("B2 2BB"))
        assert sync.map is not None
        assert sync.error == ""


class TestStaleRequests:
    def test_last_request_wins(self, geocoder):
        sync = _sync(geocoder)

        async def _run():
            geocoder.hold("A11AA")
            first = asyncio.create_task(sync.set_postcode("A1 1AA"))
            await asyncio.sleep(0)
            assert sync.status == "resolving"

            second = await sync.set_postcode("B2 2BB")
            geocoder.release("A11AA")
            return await first, second

        stale, fresh = asyncio.run(_run())

        assert stale is False
        assert fresh is True
        assert sync.postcode == "B2 2BB"
        assert sync.geo.display_name.startswith("B2 2BB")
        assert sync.map.marker == (52.4800, -1.8900)
        assert geocoder.forward_calls == ["A11AA", "B22BB"]

    def test_stale_failure_is_not_surfaced(self, geocoder):
        sync = _sync(geocoder)

        async def _run():
            geocoder.hold("A11AA")
            first = asyncio.create_task(sync.set_postcode("A1 1AA"))
            await asyncio.sleep(0)
            await sync.set_postcode("B2 2BB")
            geocoder.fail_forward = True
            geocoder.release("A11AA")
            await first

        asyncio.run(_run())

        assert sync.status == "resolved"
        assert sync.error == ""

    def test_reverse_result_dropped_after_newer_edit(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))

        async def _run():
            geocoder.hold((51.4590, -0.1390))
            drag = asyncio.create_task(sync.map.drag_end(51.4590, -0.1390))
            while not geocoder.reverse_calls:
                await asyncio.sleep(0)

            await sync.set_postcode("B2 2BB")
            geocoder.release((51.4590, -0.1390))
            await drag

        asyncio.run(_run())

        assert sync.postcode == "B2 2BB"
        assert sync.geo.display_name.startswith("B2 2BB")
        assert geocoder.forward_calls == ["SW46QD", "B22BB"]

    def test_reverse_result_dropped_after_newer_drag(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("B2 2BB"))

        async def _run():
            geocoder.hold((51.4590, -0.1390))
            first = asyncio.create_task(sync.map.drag_end(51.4590, -0.1390))
            while not geocoder.reverse_calls:
                await asyncio.sleep(0)

            await sync.map.drag_end(51.4626, -0.1410)
            geocoder.release((51.4590, -0.1390))
            await first

        asyncio.run(_run())

        assert sync.postcode == "SW4 6QD"
        assert geocoder.forward_calls == ["B22BB", "SW46QD"]

    def test_generation_increases_per_edit(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.set_postcode("B2 2BB"))
        asyncio.run(sync.set_postcode(""))
        assert sync.generation == 3


class TestMarkerFlow:
    def test_drag_to_same_postcode_does_not_refetch(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.map.drag_end(51.4626, -0.1410))

        assert geocoder.reverse_calls == [(51.4626, -0.1410)]
        assert geocoder.forward_calls == ["SW46QD"]
        assert sync.postcode == "SW4 6QD"

    def test_same_postcode_different_spacing_is_noop(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW46QD"))
        asyncio.run(sync.map.drag_end(51.4626, -0.1410))

        assert geocoder.forward_calls == ["SW46QD"]
        assert sync.postcode == "SW46QD"

    def test_drag_to_new_postcode_reruns_forward_flow(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.map.drag_end(51.4590, -0.1390))

        assert sync.postcode == "SW4 7AA"
        assert geocoder.forward_calls == ["SW46QD", "SW47AA"]
        assert sync.geo.display_name.startswith("Clapham Common")

    def test_click_moves_marker_then_reverse_geocodes(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.map.click(51.4590, -0.1390))

        assert geocoder.reverse_calls == [(51.4590, -0.1390)]
        assert sync.postcode == "SW4 7AA"

    def test_reverse_failure_is_silent_and_marker_stays(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        geocoder.fail_reverse = True
        asyncio.run(sync.map.click(51.0, 0.0))

        assert sync.map.marker == (51.0, 0.0)
        assert sync.error == ""
        assert sync.status == "resolved"
        assert sync.postcode == "SW4 6QD"

    def test_reverse_without_postcode_is_ignored(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.map.drag_end(0.0, 0.0))

        assert sync.map.marker == (0.0, 0.0)
        assert sync.postcode == "SW4 6QD"
        assert geocoder.forward_calls == ["SW46QD"]

    def test_postcode_sink_receives_reverse_result(self, geocoder):
        received = []

        async def sink(postcode):
            received.append(postcode)

        sync = GeocodeSynchronizer(geocoder, MapView, on_postcode=sink)
        asyncio.run(sync.set_postcode("SW4 6QD"))
        asyncio.run(sync.map.drag_end(51.4590, -0.1390))

        assert received == ["SW4 7AA"]
        # The sink owns the field
        assert sync.postcode == "SW4 6QD"

    def test_click_before_map_exists_is_ignored(self, geocoder):
        sync = _sync(geocoder)
        asyncio.run(sync.handle_map_click(51.0, 0.0))
        assert geocoder.reverse_calls == []


def test_snapshot_reflects_state(geocoder):
    sync = _sync(geocoder)
    assert sync.snapshot().status == "idle"
    assert sync.snapshot().map.initialized is False

    asyncio.run(sync.set_postcode("SW4 6QD"))
    snap = sync.snapshot()
    assert snap.status == "resolved"
    assert snap.postcode == "SW4 6QD"
    assert snap.generation == 1
    assert snap.map.initialized
    assert snap.map.marker == (51.4626, -0.1410)
