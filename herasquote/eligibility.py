"""Option filtering by computed wind pressure and required height.

An option is NOT applicable when:
- there is no wind estimate yet,
- the required height exceeds the option's max height, or
- the wind pressure exceeds the option's capacity.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from herasquote.schemas import FenceOption, OptionView, WindEstimate


def is_eligible(
    option: FenceOption,
    wind: Optional[WindEstimate],
    required_height_m: float,
) -> bool:
    """Return True when ``option`` satisfies both height and pressure."""
    if wind is None:
        return False
    height_too_short = required_height_m > option.max_height_m
    over_capacity = wind.pressure_kpa > option.capacity_kpa
    return not (height_too_short or over_capacity)


def eligible_options(
    options: Iterable[FenceOption],
    wind: Optional[WindEstimate],
    required_height_m: float,
) -> list[FenceOption]:
    """Eligible subset of ``options``, in catalog order."""
    return [o for o in options if is_eligible(o, wind, required_height_m)]


def option_views(
    options: Iterable[FenceOption],
    wind: Optional[WindEstimate],
    required_height_m: float,
    selected: Iterable[str] = (),
) -> list[OptionView]:
    chosen = set(selected)
    return [
        OptionView(
            option=o,
            eligible=is_eligible(o, wind, required_height_m),
            selected=o.id in chosen,
        )
        for o in options
    ]


__all__ = ["is_eligible", "eligible_options", "option_views"]
