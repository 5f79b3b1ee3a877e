"""
Density and biomass on belt transects.

Counts (or grams) are summed per transect and category, expanded over the
category universe and normalized from the surveyed belt area to a fixed
areal unit (fish per 100 m2, invertebrates per m2).
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd
from reef_survey.aggregate.enrich import join_metadata
from reef_survey.aggregate.grid import expand_grid

# AGRRA fish size classes, total length in cm
SIZE_BINS = [0, 5, 10, 20, 30, 40, np.inf]
SIZE_LABELS = ["0-5", "6-10", "11-20", "21-30", "31-40", ">40"]


def areal_rate(
    df: pd.DataFrame,
    unit_keys: list[str],
    category_col: str,
    value_col: str,
    belt_area_m2: float,
    per_area_m2: float,
    out_col: str,
    universe: Iterable[str] | None = None,
    units: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """
    Sum `value_col` per unit and category and convert to a rate per `per_area_m2`.

    Rows with a missing category only mark sampled units; they contribute to
    `units` (when not given) but not to any category total.

    Returns columns: unit_keys, category_col, value_col, out_col.
    """
    if belt_area_m2 <= 0 or per_area_m2 <= 0:
        raise ValueError("areal_rate: areas must be positive")
    unit_frame = df[unit_keys] if units is None else units
    seen = df.dropna(subset=[category_col])
    observed = seen.groupby(unit_keys + [category_col], sort=True)[value_col].sum().reset_index()
    grid = expand_grid(observed, unit_keys, category_col, [value_col], universe=universe, units=unit_frame)
    grid[out_col] = grid[value_col] / belt_area_m2 * per_area_m2
    return grid


def belt_density(df: pd.DataFrame, unit_keys: list[str], category_col: str,
                 belt_area_m2: float, per_area_m2: float, **kwargs) -> pd.DataFrame:
    return areal_rate(df, unit_keys, category_col, "count", belt_area_m2, per_area_m2, "density", **kwargs)


def add_fish_weight(fish: pd.DataFrame, species_meta: pd.DataFrame) -> pd.DataFrame:
    """
    Add `weight_g` per fish (W = a * L^b) and `biomass_g` (count * W).

    Length-weight coefficients come from a one-to-one join on species code;
    a species without coefficients raises MetadataIntegrityError.
    """
    out = join_metadata(fish, species_meta, key="code", df_key="species", columns=["a", "b"])
    out["weight_g"] = out["a"] * np.power(out["length_cm"].astype(float), out["b"])
    out["biomass_g"] = out["weight_g"] * out["count"]
    return out.drop(columns=["a", "b"])


def fish_biomass(fish: pd.DataFrame, species_meta: pd.DataFrame, unit_keys: list[str],
                 category_col: str, belt_area_m2: float, per_area_m2: float, **kwargs) -> pd.DataFrame:
    """
    Biomass in grams per `per_area_m2` by unit and category.
    """
    seen = fish.dropna(subset=["species"])
    weighted = add_fish_weight(seen, species_meta) if not seen.empty else seen.assign(biomass_g=0.0)
    kwargs.setdefault("units", fish[unit_keys])
    return areal_rate(weighted, unit_keys, category_col, "biomass_g", belt_area_m2, per_area_m2,
                      "biomass", **kwargs)


def size_class(length_cm: pd.Series) -> pd.Series:
    """
    Bin total lengths into size classes; lengths of 0 fall in the first class.
    """
    binned = pd.cut(length_cm.astype(float), bins=SIZE_BINS, labels=SIZE_LABELS, include_lowest=True)
    return binned.astype("string")
