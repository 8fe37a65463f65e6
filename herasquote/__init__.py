"""Heras quote - location & wind resolver for temporary fencing quotes."""

from herasquote.eligibility import eligible_options, is_eligible
from herasquote.schemas import (
    FenceOption,
    GeoPoint,
    SiteInput,
    WindEstimate,
)
from herasquote.session import QuoteSession
from herasquote.sync import GeocodeSynchronizer
from herasquote.wind import estimate_wind

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "estimate_wind",
    "is_eligible",
    "eligible_options",
    "FenceOption",
    "GeoPoint",
    "GeocodeSynchronizer",
    "QuoteSession",
    "SiteInput",
    "WindEstimate",
]
