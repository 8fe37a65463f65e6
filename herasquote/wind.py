"""Deterministic mock wind model keyed on the site postcode.

This is a placeholder, not a structural calculation. The reported speed
is back-derived from the capped pressure, so it can differ from the
speed the pressure was first computed from.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from herasquote.schemas import WindEstimate

BASE_SPEED_MS = 22
SPEED_SPREAD = 11
PRESSURE_COEFFICIENT = 0.0005  # kPa per (m/s)^2
MAX_PRESSURE_KPA = 0.149

_WHITESPACE = re.compile(r"\s+")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalise_postcode(postcode: str) -> str:
    """Strip all whitespace and uppercase: ``"sw4 6qd"`` -> ``"SW46QD"``."""
    return _WHITESPACE.sub("", postcode or "").upper()


def estimate_wind(postcode: str) -> WindEstimate:
    """Derive a (speed, pressure) pair from a postcode.

    Total over all strings; an empty postcode still yields an estimate,
    so callers that want "no estimate" for blank input should use
    :func:`wind_for_postcode`.
    """
    cleaned = normalise_postcode(postcode)
    code_sum = sum(ord(ch) for ch in cleaned)

    speed = _round_half_up(BASE_SPEED_MS + (code_sum % SPEED_SPREAD))
    pressure_raw = round(PRESSURE_COEFFICIENT * speed * speed, 3)
    pressure_kpa = min(pressure_raw, MAX_PRESSURE_KPA)
    speed_ms = _round_half_up(math.sqrt(pressure_kpa / PRESSURE_COEFFICIENT))

    return WindEstimate(speed_ms=speed_ms, pressure_kpa=pressure_kpa)


def wind_for_postcode(postcode: str) -> Optional[WindEstimate]:
    """Estimate wind for a non-blank postcode, ``None`` otherwise."""
    if not (postcode or "").strip():
        return None
    return estimate_wind(postcode)


__all__ = [
    "BASE_SPEED_MS",
    "MAX_PRESSURE_KPA",
    "PRESSURE_COEFFICIENT",
    "estimate_wind",
    "normalise_postcode",
    "wind_for_postcode",
]
