"""Forward and reverse geocoding against Nominatim (OpenStreetMap).

Only the first forward candidate and the reverse ``address.postcode``
field are used by the rest of the application.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from herasquote.errors import LookupEmpty, ReverseLookupFailure, TransportFailure
from herasquote.schemas import GeocodeCandidate
from herasquote.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def forward(self, postcode: str) -> list[GeocodeCandidate]: ...

    async def reverse(self, lat: float, lon: float) -> Optional[str]: ...


def _parse_candidates(payload: Any) -> list[GeocodeCandidate]:
    if not isinstance(payload, list):
        raise TransportFailure(f"Unexpected search payload: {type(payload).__name__}")
    candidates = []
    for item in payload:
        candidates.append(
            GeocodeCandidate(
                latitude=float(item["lat"]),
                longitude=float(item["lon"]),
                display_name=item.get("display_name") or "",
            )
        )
    return candidates


class NominatimGeocoder:
    """Async Nominatim client.

    Parameters
    ----------
    base_url : str
        Service root, e.g. ``https://nominatim.openstreetmap.org``.
    user_agent : str
        Nominatim's usage policy requires an identifying User-Agent.
    country_codes : str
        Restricts forward lookups (``"gb"`` for UK postcodes).
    timeout : float | None
        Transport timeout in seconds; ``None`` waits forever.
    client : httpx.AsyncClient | None
        Injected client (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "herasquote/0.1.0",
        country_codes: str = "gb",
        timeout: Optional[float] = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.country_codes = country_codes
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=httpx.Timeout(timeout),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "NominatimGeocoder":
        settings = settings or get_settings()
        return cls(
            base_url=settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            country_codes=settings.geocoder_country_codes,
            timeout=settings.geocoder_timeout_s,
        )

    async def __aenter__(self) -> "NominatimGeocoder":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        response = await self._client.get(f"{self.base_url}{path}", params=params)
        response.raise_for_status()
        return response.json()

    async def forward(self, postcode: str) -> list[GeocodeCandidate]:
        """Resolve a postcode to candidate coordinates.

        Raises
        ------
        LookupEmpty
            When the service knows no place for the postcode.
        TransportFailure
            On HTTP/network errors or an unreadable payload.
        """
        params = {
            "format": "json",
            "addressdetails": 1,
            "countrycodes": self.country_codes,
            "limit": 1,
            "postalcode": postcode,
        }
        try:
            payload = await self._get_json("/search", params)
            candidates = _parse_candidates(payload)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Forward geocode failed for %r: %s", postcode, exc)
            raise TransportFailure(str(exc)) from exc
        if not candidates:
            raise LookupEmpty(postcode)
        logger.debug("Forward geocode %r -> %d candidate(s)", postcode, len(candidates))
        return candidates

    async def reverse(self, lat: float, lon: float) -> Optional[str]:
        """Return the uppercased postcode at (lat, lon), or None if absent."""
        params = {
            "format": "jsonv2",
            "lat": lat,
            "lon": lon,
            "addressdetails": 1,
        }
        try:
            payload = await self._get_json("/reverse", params)
        except (httpx.HTTPError, ValueError) as exc:
            raise ReverseLookupFailure(str(exc)) from exc

        address = payload.get("address") if isinstance(payload, dict) else None
        postcode = (address or {}).get("postcode") or ""
        return postcode.upper() or None


__all__ = ["Geocoder", "NominatimGeocoder"]
