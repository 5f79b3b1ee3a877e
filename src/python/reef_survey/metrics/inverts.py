"""
Macroinvertebrate metrics.

Density (individuals per m2) per belt transect by species and by group,
rolled up transect → site. Urchin density is the "Urchin" group.
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from reef_survey.aggregate.density import belt_density
from reef_survey.aggregate.enrich import join_metadata
from reef_survey.aggregate.levels import roll_up
from reef_survey.classify import CodeTables, classify, resolve_metadata_codes

HIERARCHY = ["site", "transect"]


def invert_metrics(
    inverts: pd.DataFrame,
    tables: CodeTables,
    species_meta: pd.DataFrame,
    settings: dict[str, Any],
    units: dict[str, float],
    agg: dict[str, Any],
) -> dict[str, dict[str, pd.DataFrame]]:
    policy = settings["unmapped_codes"]
    transects = inverts[HIERARCHY].drop_duplicates()
    df = classify(inverts, "species", tables.invert_group, "invert_group", "invert_group", policy)
    df, _ = resolve_metadata_codes(df, "species", species_meta, "invert_species", policy,
                                   note="counted without common name or family")
    area, per = units["invert_belt_area_m2"], units["invert_per_area_m2"]

    known_codes = set(species_meta["code"].dropna())
    species = roll_up(belt_density(df, HIERARCHY, "species", area, per, units=transects),
                      HIERARCHY, "species", "density", agg["se_ddof"])
    species = {
        level: join_metadata(t, species_meta, key="code", df_key="species",
                             columns=["common_name", "family"], rows=t["species"].isin(known_codes))
        for level, t in species.items()
    }
    groups = roll_up(belt_density(df, HIERARCHY, "invert_group", area, per, units=transects),
                     HIERARCHY, "invert_group", "density", agg["se_ddof"])
    return {"species_density": species, "group_density": groups}
