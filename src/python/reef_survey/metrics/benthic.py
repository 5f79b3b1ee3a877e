"""
Benthic metrics.

From point-intercept rows to four cover products, each rolled up to site
and checked against the 100 % invariant at every level:
- benthic_class: cover by benthic class over available substrate
- algal_type: cover by algal type; non-algal available points form a
  "Non-algal" remainder so totals still reconstruct 100 %, and the algal
  types must sum to their parent classes
- coral_species: cover by hard coral species code; the species must sum to
  hard coral cover, and every level carries the code description
- coral_condition: share of hard-coral points by health status, computed
  per transect (meters hold too few coral points) and rolled up to site
"""

from __future__ import annotations

from typing import Any

import pandas as pd
from reef_survey.aggregate.cover import mark_available, percent_cover
from reef_survey.aggregate.enrich import join_metadata
from reef_survey.aggregate.levels import level_keys, roll_up
from reef_survey.aggregate.validate import check_cover_totals, check_parent_totals
from reef_survey.classify import CodeTables, classify

HIERARCHY = ["site", "transect", "meter"]
CONDITION_HIERARCHY = ["site", "transect"]
NON_ALGAL = "Non-algal"
NON_CORAL = "Non-coral"


def classify_benthic(points: pd.DataFrame, tables: CodeTables, settings: dict[str, Any]) -> pd.DataFrame:
    """
    Add `benthic_class`, `available`, `algal_type` and `health_status` columns.

    Under the "exclude" policy a row dropped by any table is dropped from
    every benthic product, so all of them share one set of denominators.
    """
    policy = settings["unmapped_codes"]
    df = classify(points, "code", tables.benthic_class, "benthic_class", "benthic_class", policy)
    df = mark_available(df, "benthic_class", settings["unavailable_classes"])

    is_algal = df["benthic_class"].isin(settings["algal_parent_classes"])
    algal = classify(df[is_algal], "code", tables.algal_type, "algal_type", "algal_type", policy)
    df = df[~is_algal | df.index.isin(algal.index)].copy()
    df["algal_type"] = pd.Series(NON_ALGAL, index=df.index, dtype="string")
    df.loc[algal.index, "algal_type"] = algal["algal_type"]
    df.loc[~df["available"], "algal_type"] = pd.NA

    is_coral = df["benthic_class"] == settings["coral_class"]
    coral = df[is_coral].copy()
    coral["condition"] = coral["condition"].fillna(_healthy_code(tables, settings))
    coral = classify(coral, "condition", tables.health_status, "health_status", "health_status", policy)
    df = df[~is_coral | df.index.isin(coral.index)].copy()
    df["health_status"] = pd.Series(pd.NA, index=df.index, dtype="string")
    df.loc[coral.index, "health_status"] = coral["health_status"]
    return df.reset_index(drop=True)


def _healthy_code(tables: CodeTables, settings: dict[str, Any]) -> str:
    # a blank condition on a coral point means the colony was healthy
    for code, status in tables.health_status.items():
        if status == settings["healthy_status"]:
            return code
    raise ValueError(
        f"codes.yml:health_status: no code maps to '{settings['healthy_status']}' "
        "(analysis.yml:classification.healthy_status)"
    )


def _checked_levels(levels: dict[str, pd.DataFrame], hierarchy: list[str], label: str,
                    tolerance: float) -> dict[str, pd.DataFrame]:
    for level, table in levels.items():
        check_cover_totals(table, level_keys(hierarchy, level), tolerance=tolerance,
                           label=f"{label} ({level})")
    return levels


def benthic_metrics(
    points: pd.DataFrame,
    tables: CodeTables,
    benthic_meta: pd.DataFrame,
    settings: dict[str, Any],
    agg: dict[str, Any],
) -> dict[str, dict[str, pd.DataFrame]]:
    """
    Compute and validate all benthic cover products.

    Parameters
    - points: loader output (one row per point)
    - tables: code tables
    - benthic_meta: code descriptions (config/metadata/benthic_codes.csv)
    - settings: `get_classification_settings` output
    - agg: `get_aggregation_settings` output

    Returns {metric: {level: table}}.
    """
    ddof, tol = agg["se_ddof"], agg["cover_tolerance"]
    df = classify_benthic(points, tables, settings)
    avail = df[df["available"]]

    class_cover = percent_cover(avail, HIERARCHY, "benthic_class")
    class_levels = _checked_levels(
        roll_up(class_cover, HIERARCHY, "benthic_class", "percent", ddof, n_col="total_points"),
        HIERARCHY, "benthic_class cover", tol,
    )

    algal_cover = percent_cover(avail, HIERARCHY, "algal_type")
    algal_levels = _checked_levels(
        roll_up(algal_cover, HIERARCHY, "algal_type", "percent", ddof, n_col="total_points"),
        HIERARCHY, "algal_type cover", tol,
    )
    for level in HIERARCHY:
        check_parent_totals(
            algal_levels[level], class_levels[level], level_keys(HIERARCHY, level),
            "algal_type", "benthic_class", settings["algal_parent_classes"],
            exclude_sub=[NON_ALGAL], tolerance=tol, label=f"algal_type vs benthic_class ({level})",
        )

    species_levels = _coral_species(avail, class_levels, benthic_meta, settings, ddof, tol)

    coral = df[df["health_status"].notna()]
    condition = percent_cover(coral, CONDITION_HIERARCHY, "health_status")
    condition_levels = _checked_levels(
        roll_up(condition, CONDITION_HIERARCHY, "health_status", "percent", ddof, n_col="total_points"),
        CONDITION_HIERARCHY, "coral_condition", tol,
    )

    return {
        "benthic_class": class_levels,
        "algal_type": algal_levels,
        "coral_species": species_levels,
        "coral_condition": condition_levels,
    }


def _coral_species(avail: pd.DataFrame, class_levels: dict[str, pd.DataFrame], benthic_meta: pd.DataFrame,
                   settings: dict[str, Any], ddof: int, tol: float) -> dict[str, pd.DataFrame]:
    df = avail.copy()
    is_coral = df["benthic_class"] == settings["coral_class"]
    df["coral_code"] = df["code"].where(is_coral, NON_CORAL)
    cover = percent_cover(df, HIERARCHY, "coral_code")
    levels = _checked_levels(
        roll_up(cover, HIERARCHY, "coral_code", "percent", ddof, n_col="total_points"),
        HIERARCHY, "coral_species cover", tol,
    )
    out = {}
    for level, table in levels.items():
        check_parent_totals(
            table, class_levels[level], level_keys(HIERARCHY, level),
            "coral_code", "benthic_class", [settings["coral_class"]],
            exclude_sub=[NON_CORAL], tolerance=tol, label=f"coral_species vs hard coral ({level})",
        )
        species = table[table["coral_code"] != NON_CORAL].rename(columns={"coral_code": "code"})
        out[level] = join_metadata(species.reset_index(drop=True), benthic_meta, key="code",
                                   columns=["description"])
    return out
