"""
Multi-level aggregation.

Each level is the unweighted mean of the next finer level's per-unit
values, so every transect (or site) counts equally regardless of how many
points or fish it produced. Standard error at each level is
std(ddof) / sqrt(n) over those finer units.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

LEVEL_COLUMNS = ["mean", "se", "n"]


def level_keys(hierarchy: list[str], level: str) -> list[str]:
    """
    Key columns identifying a unit at `level`.

    >>> level_keys(["site", "transect", "meter"], "transect")
    ['site', 'transect']
    """
    return hierarchy[: hierarchy.index(level) + 1]


def summarize(df: pd.DataFrame, group_cols: list[str], category_col: str,
              value_col: str = "mean", ddof: int = 1) -> pd.DataFrame:
    """
    Mean, standard error and count of `value_col` per group and category.

    SE is NaN for groups with a single value.
    """
    g = df.groupby(group_cols + [category_col], sort=True)[value_col]
    out = pd.concat(
        {"mean": g.mean(), "sd": g.std(ddof=ddof), "n": g.count()},
        axis=1,
    ).reset_index()
    out["se"] = out["sd"] / np.sqrt(out["n"])
    out.loc[out["n"] < 2, "se"] = np.nan
    out["n"] = out["n"].astype(int)
    return out[group_cols + [category_col] + LEVEL_COLUMNS]


def roll_up(
    base: pd.DataFrame,
    hierarchy: list[str],
    category_col: str,
    value_col: str,
    ddof: int = 1,
    n_col: str | None = None,
) -> dict[str, pd.DataFrame]:
    """
    Aggregate unit values up the key hierarchy.

    Parameters
    - base: one row per finest unit and category (e.g. meter-level percent cover)
    - hierarchy: key columns from coarsest to finest, e.g. ["site", "transect", "meter"]
    - category_col: category column
    - value_col: value at the finest level
    - ddof: delta degrees of freedom for the standard deviation
    - n_col: optional column giving the sample count of a finest-level value
      (e.g. points per meter); defaults to 1

    Returns {level name: table} keyed by each hierarchy column, finest first,
    each with columns <level keys>, category_col, mean, se, n.

    Example
    -------
    >>> levels = roll_up(meter_cover, ["site", "transect", "meter"], "benthic_class", "percent")
    >>> sorted(levels)
    ['meter', 'site', 'transect']
    """
    cols = hierarchy + [category_col]
    dup = base.duplicated(cols)
    if dup.any():
        raise ValueError(f"roll_up: {int(dup.sum())} duplicate row(s) for {cols}")

    finest = base[cols].copy()
    finest["mean"] = base[value_col].astype(float).values
    finest["se"] = np.nan
    finest["n"] = base[n_col].astype(int).values if n_col else 1
    finest = finest.sort_values(cols).reset_index(drop=True)

    levels = {hierarchy[-1]: finest}
    current = finest
    for depth in range(len(hierarchy) - 1, 0, -1):
        current = summarize(current, hierarchy[:depth], category_col, "mean", ddof)
        levels[hierarchy[depth - 1]] = current
    return levels
