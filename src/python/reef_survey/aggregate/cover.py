"""
Percent cover from point-intercept data.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
from reef_survey.aggregate.grid import expand_grid


def mark_available(df: pd.DataFrame, class_col: str, unavailable: Iterable[str],
                   out_col: str = "available") -> pd.DataFrame:
    """
    Flag points whose class is comparable biological cover.

    Points of an unavailable class (sand, hole, seagrass, pavement by
    default) are not part of any cover denominator.
    """
    out = df.copy()
    out[out_col] = ~out[class_col].isin(list(unavailable))
    return out


def percent_cover(
    points: pd.DataFrame,
    unit_keys: list[str],
    category_col: str,
    universe: Iterable[str] | None = None,
) -> pd.DataFrame:
    """
    Percent cover per unit and category over the given points.

    Every point passed in counts toward its unit's denominator, so callers
    remove unavailable substrate first. Units with no points are absent
    from the output (their cover is undefined, not zero).

    Returns columns: unit_keys, category_col, points, total_points, percent.
    """
    if points[category_col].isna().any():
        raise ValueError(f"percent_cover: points with no '{category_col}'")
    totals = points.groupby(unit_keys, sort=True).size().rename("total_points").reset_index()
    counts = points.groupby(unit_keys + [category_col], sort=True).size().rename("points").reset_index()
    grid = expand_grid(counts, unit_keys, category_col, ["points"], universe=universe, units=totals)
    grid = grid.merge(totals, on=unit_keys, how="left")
    grid["points"] = grid["points"].astype(int)
    grid["percent"] = 100.0 * grid["points"] / grid["total_points"]
    return grid
