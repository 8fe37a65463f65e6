"""Exception taxonomy for the location & wind resolver.

None of these are fatal: each is recovered locally and the lookup is
attempted again on the next qualifying input change.
"""

from __future__ import annotations

# User-visible messages
NOT_FOUND_MESSAGE = "Location not found."
FETCH_FAILED_MESSAGE = "Could not fetch map location."
MAP_LOAD_FAILED_MESSAGE = "Could not load map library."


class HerasQuoteError(Exception):
    """Base class for all herasquote errors."""


class InputError(HerasQuoteError, ValueError):
    """Invalid form input (bad postcode format, missing project name...)."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class LookupEmpty(HerasQuoteError):
    """The forward geocoder returned no match for a postcode."""

    message = NOT_FOUND_MESSAGE


class TransportFailure(HerasQuoteError):
    """Network or service error while talking to the geocoder."""

    message = FETCH_FAILED_MESSAGE


class ReverseLookupFailure(TransportFailure):
    """Reverse geocoding failed. Never surfaced to the user."""


class MapLibraryLoadFailure(HerasQuoteError):
    """The interactive map could not be created."""

    message = MAP_LOAD_FAILED_MESSAGE


__all__ = [
    "NOT_FOUND_MESSAGE",
    "FETCH_FAILED_MESSAGE",
    "MAP_LOAD_FAILED_MESSAGE",
    "HerasQuoteError",
    "InputError",
    "LookupEmpty",
    "TransportFailure",
    "ReverseLookupFailure",
    "MapLibraryLoadFailure",
]
