"""Fence option catalog and form choice lists."""

from __future__ import annotations

from typing import Optional

from herasquote.schemas import FenceOption, parse_height_m

IMG1 = "https://i.ibb.co/LzMWRbqj/IMG1-fence-1.jpg"
IMG2 = "https://i.ibb.co/Kc61kkHd/IMG2-fence-2.jpg"
IMG3 = "https://i.ibb.co/VYkkBwWW/IMG3-fence-3.jpg"
IMG4 = "https://i.ibb.co/pBCs5YHd/IMG4-fence-4.jpg"

FENCE_OPTIONS: tuple[FenceOption, ...] = (
    # --- Standard 2.0 m panels ---
    FenceOption(
        id="A",
        name="2.0 m panels @ 3.5 m centres",
        capacity_kpa=0.1,
        max_height_m=2.0,
        image=IMG3,
    ),
    FenceOption(
        id="B",
        name="2.0 m panels + rear brace/ballast",
        capacity_kpa=0.2,
        max_height_m=2.0,
        image=IMG2,
    ),
    # --- 2.4 m hoarding / mesh ---
    FenceOption(
        id="C",
        name="2.4 m hoarding with buttress @ 2.4 m",
        capacity_kpa=0.3,
        max_height_m=2.4,
        image=IMG1,
    ),
    FenceOption(
        id="D",
        name="2.4 m mesh with rear braces @ 2.4 m",
        capacity_kpa=0.3,
        max_height_m=2.4,
        image=IMG2,
    ),
    FenceOption(
        id="E",
        name="2.4 m hoarding + heavy ballast",
        capacity_kpa=0.4,
        max_height_m=2.4,
        image=IMG1,
    ),
    # --- 3.0 m hoarding ---
    FenceOption(
        id="F",
        name="3.0 m hoarding with twin buttress",
        capacity_kpa=0.5,
        max_height_m=3.0,
        image=IMG4,
    ),
)

_OPTIONS_BY_ID: dict[str, FenceOption] = {o.id: o for o in FENCE_OPTIONS}

DURATION_CHOICES = ["< 28 days", "1–3 months", "3–6 months", "> 6 months"]
GROUND_CHOICES = [
    "Hardstanding (concrete/asphalt)",
    "Firm granular (Type 1/compacted)",
    "Soft/grass/soil",
    "Unknown – assume worst case",
]
HEIGHT_CHOICES = ["2.0 m", "2.4 m", "3.0 m"]


def get_option(option_id: str) -> Optional[FenceOption]:
    """Look up a catalog option by id."""
    return _OPTIONS_BY_ID.get(option_id)


__all__ = [
    "FENCE_OPTIONS",
    "DURATION_CHOICES",
    "GROUND_CHOICES",
    "HEIGHT_CHOICES",
    "get_option",
    "parse_height_m",
]
