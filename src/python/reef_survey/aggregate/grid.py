"""
Grid expansion.

Guarantees one row per (grouping key × category) so that a category never
seen in a sampling unit contributes an explicit zero to every mean instead
of silently dropping out of it. Cover, density and biomass all go through
`expand_grid`.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd


def expand_grid(
    observed: pd.DataFrame,
    keys: list[str],
    category_col: str,
    value_cols: list[str],
    universe: Iterable[str] | None = None,
    units: pd.DataFrame | None = None,
    fill_value: float = 0.0,
) -> pd.DataFrame:
    """
    Expand observed values to the full units × categories grid.

    Parameters
    - observed: one row per (keys, category) with the measured `value_cols`
    - keys: grouping key columns (e.g. ["site", "transect", "meter"])
    - category_col: category column
    - value_cols: columns zero-filled for absent combinations
    - universe: categories to expand over; defaults to every category in
      `observed`, sorted
    - units: frame whose distinct `keys` rows are the sampled units; defaults
      to the units present in `observed`. Pass it when a unit can be sampled
      with nothing observed.
    - fill_value: value for absent combinations

    Raises ValueError on duplicate (keys, category) rows, on observed
    categories outside an explicit `universe`, and on observed keys that
    are not among `units`.
    """
    cols = keys + [category_col]
    missing = [c for c in cols + value_cols if c not in observed.columns]
    if missing:
        raise ValueError(f"expand_grid: observed is missing column(s): {', '.join(missing)}")
    if observed[category_col].isna().any():
        raise ValueError(f"expand_grid: observed has missing values in '{category_col}'")
    dup = observed.duplicated(cols)
    if dup.any():
        raise ValueError(f"expand_grid: {int(dup.sum())} duplicate row(s) for {cols}")

    seen = {str(c) for c in observed[category_col].unique()}
    if universe is None:
        cats = sorted(seen)
    else:
        cats = [str(c) for c in dict.fromkeys(universe)]
        extra = seen - set(cats)
        if extra:
            raise ValueError(
                f"expand_grid: observed categories outside the universe: {', '.join(sorted(extra))}"
            )

    unit_frame = (observed if units is None else units)[keys].drop_duplicates()
    if units is not None:
        check = observed[keys].drop_duplicates().merge(unit_frame, on=keys, how="left", indicator=True)
        if (check["_merge"] == "left_only").any():
            raise ValueError("expand_grid: observed rows reference units not in `units`")

    obs = observed[cols + value_cols].copy()
    obs[category_col] = obs[category_col].astype(str)
    cat_frame = pd.DataFrame({category_col: pd.Series(cats, dtype=object)})
    grid = unit_frame.merge(cat_frame, how="cross")
    grid = grid.merge(obs, on=cols, how="left")
    grid[value_cols] = grid[value_cols].fillna(fill_value)
    return grid.sort_values(cols).reset_index(drop=True)
