"""Shared test doubles and fixtures."""

import asyncio

import pytest

from herasquote.errors import LookupEmpty, ReverseLookupFailure, TransportFailure
from herasquote.schemas import GeocodeCandidate

# Sample places keyed by normalised postcode
SAMPLE_PLACES = {
    "SW46QD": (51.4626, -0.1410, "Clapham, London SW4 6QD"),
    "A11AA": (51.5000, -0.1000, "A1 1AA, Somewhere"),
    "B22BB": (52.4800, -1.8900, "B2 2BB, Birmingham"),
    "SW47AA": (51.4590, -0.1390, "Clapham Common, London SW4 7AA"),
}

# Sample reverse lookups keyed by (lat, lon)
SAMPLE_REVERSE = {
    (51.4626, -0.1410): "SW4 6QD",
    (51.4590, -0.1390): "SW4 7AA",
}


class FakeGeocoder:
    """In-memory geocoder whose lookups can be held open and released."""

    def __init__(self, places=None, reverse=None):
        self.places = dict(SAMPLE_PLACES if places is None else places)
        self.reverse_map = dict(SAMPLE_REVERSE if reverse is None else reverse)
        self.forward_calls: list[str] = []
        self.reverse_calls: list[tuple[float, float]] = []
        self.fail_forward = False
        self.fail_reverse = False
        self._held: dict = {}

    def hold(self, key) -> None:
        """Block lookups for a postcode, or a (lat, lon) reverse lookup."""
        self._held[key] = asyncio.Event()

    def release(self, key) -> None:
        self._held.pop(key).set()

    async def forward(self, postcode):
        self.forward_calls.append(postcode)
        held = self._held.get(postcode)
        if held is not None:
            await held.wait()
        if self.fail_forward:
            raise TransportFailure("connection refused")
        hit = self.places.get(postcode)
        if hit is None:
            raise LookupEmpty(postcode)
        lat, lon, label = hit
        return [GeocodeCandidate(latitude=lat, longitude=lon, display_name=label)]

    async def reverse(self, lat, lon):
        self.reverse_calls.append((lat, lon))
        held = self._held.get((lat, lon))
        if held is not None:
            await held.wait()
        if self.fail_reverse:
            raise ReverseLookupFailure("timeout")
        return self.reverse_map.get((lat, lon))


@pytest.fixture
def geocoder():
    return FakeGeocoder()
