"""Pandas-based data tables for herasquote."""

from typing import Optional

import pandas as pd

from herasquote.schemas import OptionView, WindEstimate

OPTION_COLUMNS = ["id", "name", "capacity_kpa", "max_height_m", "eligible", "selected"]


def create_options_dataframe(views: list[OptionView]) -> pd.DataFrame:
    """
    Create a pandas DataFrame from rendered catalog options.

    Args:
        views: Option views for the current estimate

    Returns:
        DataFrame with one row per option
    """
    if not views:
        return pd.DataFrame(columns=OPTION_COLUMNS)

    rows = [
        {
            "id": v.option.id,
            "name": v.option.name,
            "capacity_kpa": v.option.capacity_kpa,
            "max_height_m": v.option.max_height_m,
            "eligible": v.eligible,
            "selected": v.selected,
        }
        for v in views
    ]
    return pd.DataFrame(rows, columns=OPTION_COLUMNS)


def create_summary_table(df: pd.DataFrame, wind: Optional[WindEstimate]) -> pd.DataFrame:
    """
    Create a summary table for an options DataFrame.

    Args:
        df: DataFrame from create_options_dataframe
        wind: Wind estimate the options were filtered against

    Returns:
        Summary DataFrame with metric/value rows
    """
    if df.empty:
        return pd.DataFrame()

    summary = pd.DataFrame(
        {
            "metric": ["options", "eligible", "wind_speed_ms", "wind_pressure_kpa"],
            "value": [
                len(df),
                int(df["eligible"].sum()),
                wind.speed_ms if wind else None,
                wind.pressure_kpa if wind else None,
            ],
        }
    )
    return summary


def export_to_csv(df: pd.DataFrame, filepath: str) -> None:
    """
    Export DataFrame to CSV file.

    Args:
        df: DataFrame to export
        filepath: Path to save CSV file
    """
    df.to_csv(filepath, index=False)
