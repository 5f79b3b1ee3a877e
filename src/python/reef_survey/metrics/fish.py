"""
Fish metrics.

Density (fish per 100 m2) and biomass (g per 100 m2) per belt transect,
by species, functional group, fishery status and size class, rolled up
transect → site. Every surveyed transect contributes, including transects
where nothing was seen.

A species missing from fish_species.csv follows the unmapped-code policy.
Under "warn" it still counts toward density, but it has no length-weight
coefficients and so is left out of every biomass product.
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from reef_survey.aggregate.density import SIZE_LABELS, belt_density, fish_biomass, size_class
from reef_survey.aggregate.enrich import join_metadata
from reef_survey.aggregate.levels import roll_up
from reef_survey.classify import CodeTables, classify, resolve_metadata_codes

HIERARCHY = ["site", "transect"]
COMMERCIAL = "Commercial"
NON_COMMERCIAL = "Non-commercial"


def _as_bool(s: pd.Series) -> pd.Series:
    if pd.api.types.is_bool_dtype(s):
        return s
    return s.astype(str).str.strip().str.lower().isin(["true", "1", "yes", "y"])


def prepare_fish(fish: pd.DataFrame, tables: CodeTables, species_meta: pd.DataFrame,
                 settings: dict[str, Any]) -> pd.DataFrame:
    """
    Add `functional_group`, `fishery` and `size_class` to observed fish rows.

    Empty-transect marker rows (no species) keep missing categories.
    `fishery` is only set for species with a metadata row.
    """
    policy = settings["unmapped_codes"]
    df = classify(fish, "species", tables.fish_functional_group, "functional_group",
                  "fish_functional_group", policy)
    df, known = resolve_metadata_codes(df, "species", species_meta, "fish_species", policy,
                                       note="counted in density, left out of biomass")
    df = join_metadata(df, species_meta, key="code", df_key="species", columns=["commercial"], rows=known)
    df["fishery"] = pd.Series(pd.NA, index=df.index, dtype="string")
    df.loc[known, "fishery"] = _as_bool(df.loc[known, "commercial"]).map(
        {True: COMMERCIAL, False: NON_COMMERCIAL}
    )
    seen = df["species"].notna()
    df["size_class"] = pd.Series(pd.NA, index=df.index, dtype="string")
    df.loc[seen, "size_class"] = size_class(df.loc[seen, "length_cm"])
    return df.drop(columns=["commercial"])


def fish_metrics(
    fish: pd.DataFrame,
    tables: CodeTables,
    species_meta: pd.DataFrame,
    settings: dict[str, Any],
    units: dict[str, float],
    agg: dict[str, Any],
) -> dict[str, dict[str, pd.DataFrame]]:
    """
    Compute fish density and biomass products.

    Returns {metric: {level: table}} for species_density, species_biomass,
    group_density, group_biomass, fishery_biomass and size_density.
    Species tables carry common name and family where the species has a
    metadata row.
    """
    transects = fish[HIERARCHY].drop_duplicates()
    df = prepare_fish(fish, tables, species_meta, settings)
    # rows that can be weighed: species with coefficients, plus empty-transect markers
    weighed = df[df["fishery"].notna() | df["species"].isna()]
    area, per = units["fish_belt_area_m2"], units["fish_per_area_m2"]
    ddof = agg["se_ddof"]

    products = {
        "species_density": (belt_density(df, HIERARCHY, "species", area, per, units=transects),
                            "species", "density"),
        "species_biomass": (fish_biomass(weighed, species_meta, HIERARCHY, "species", area, per,
                                         units=transects),
                            "species", "biomass"),
        "group_density": (belt_density(df, HIERARCHY, "functional_group", area, per, units=transects),
                          "functional_group", "density"),
        "group_biomass": (fish_biomass(weighed, species_meta, HIERARCHY, "functional_group", area, per,
                                       units=transects),
                          "functional_group", "biomass"),
        "fishery_biomass": (fish_biomass(weighed, species_meta, HIERARCHY, "fishery", area, per,
                                         units=transects, universe=[COMMERCIAL, NON_COMMERCIAL]),
                            "fishery", "biomass"),
        "size_density": (belt_density(df, HIERARCHY, "size_class", area, per, units=transects,
                                      universe=SIZE_LABELS),
                         "size_class", "density"),
    }

    known_codes = set(species_meta["code"].dropna())
    results = {}
    for metric, (table, category, value) in products.items():
        levels = roll_up(table, HIERARCHY, category, value, ddof)
        if category == "species":
            levels = {
                level: join_metadata(t, species_meta, key="code", df_key="species",
                                     columns=["common_name", "family"], rows=t["species"].isin(known_codes))
                for level, t in levels.items()
            }
        results[metric] = levels
    return results
