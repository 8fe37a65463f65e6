"""Pydantic schemas for herasquote data models."""

from __future__ import annotations

import math
import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

SyncStatus = Literal["idle", "resolving", "resolved", "error"]

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d*\.?\d+)")


def parse_height_m(label: str) -> float:
    """Parse the leading number of a height label such as ``"2.4 m"``.

    Unparseable labels give NaN, which never compares greater than an
    option's max height.
    """
    match = _LEADING_NUMBER.match(label or "")
    if not match:
        return math.nan
    return float(match.group(1))


class SiteInput(BaseModel):
    """Form inputs describing the construction site."""

    project_name: str = Field(default="", description="Project name")
    postcode: str = Field(default="", description="Project postcode (UK)")
    duration: str = Field(default="< 28 days", description="Expected duration on site")
    ground: str = Field(
        default="Hardstanding (concrete/asphalt)", description="Ground conditions"
    )
    height: str = Field(default="2.0 m", description="Fence height choice")
    distance_to_sea: str = Field(default="", description="Distance to sea in km")
    altitude: str = Field(default="", description="Altitude in m AOD")

    @computed_field
    @property
    def required_height_m(self) -> float:
        """Required fence height in metres, parsed from the height choice."""

        return parse_height_m(self.height)


class WindEstimate(BaseModel):
    """Mocked site wind derived from the postcode."""

    model_config = ConfigDict(frozen=True)

    speed_ms: int = Field(..., description="Reported wind speed in m/s")
    pressure_kpa: float = Field(..., description="Wind pressure in kPa (capped)")


class GeoPoint(BaseModel):
    """Resolved site location."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    display_name: str = ""


class GeocodeCandidate(BaseModel):
    """A single forward-geocoding hit."""

    latitude: float
    longitude: float
    display_name: str = ""


class FenceOption(BaseModel):
    """A fence design from the static catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    capacity_kpa: float = Field(..., gt=0, description="Wind pressure capacity in kPa")
    max_height_m: float = Field(..., gt=0, description="Maximum fence height in metres")
    image: str = Field(default="", description="Image reference")


class OptionView(BaseModel):
    """A catalog option as rendered for the current estimate."""

    option: FenceOption
    eligible: bool
    selected: bool = False


class MapSnapshot(BaseModel):
    """Serialisable state of the interactive map."""

    initialized: bool = False
    center: Optional[tuple[float, float]] = None
    zoom: Optional[int] = None
    marker: Optional[tuple[float, float]] = None
    marker_draggable: bool = False


class SyncSnapshot(BaseModel):
    """State of the geocode synchronizer."""

    postcode: str = ""
    status: SyncStatus = "idle"
    geo: Optional[GeoPoint] = None
    error: str = ""
    generation: int = 0
    map: MapSnapshot = Field(default_factory=MapSnapshot)


class QuoteSnapshot(BaseModel):
    """Everything the quote page needs to render."""

    form: SiteInput
    errors: Dict[str, str] = Field(default_factory=dict)
    submitted: bool = False
    wind: Optional[WindEstimate] = None
    location: SyncSnapshot
    options: List[OptionView] = Field(default_factory=list)
    selected: List[str] = Field(default_factory=list)


class DownloadSummary(BaseModel):
    """Stub payload for the "download selected" action."""

    project_name: str
    postcode: str
    wind: Optional[WindEstimate] = None
    options: List[FenceOption] = Field(default_factory=list)
    message: str = (
        "Mock only - would download drawings and calcs with title blocks populated."
    )

    @computed_field
    @property
    def count(self) -> int:
        """Number of selected options."""

        return len(self.options)


class FieldUpdate(BaseModel):
    """A single form field edit."""

    field: str
    value: str = ""


class MapEvent(BaseModel):
    """A click or drag-end position reported by the browser map."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


__all__ = [
    "SyncStatus",
    "parse_height_m",
    "SiteInput",
    "WindEstimate",
    "GeoPoint",
    "GeocodeCandidate",
    "FenceOption",
    "OptionView",
    "MapSnapshot",
    "SyncSnapshot",
    "QuoteSnapshot",
    "DownloadSummary",
    "FieldUpdate",
    "MapEvent",
]
