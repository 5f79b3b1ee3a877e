"""
Post-aggregation self-checks.

Cover categories within a grouping key must sum to 100 % at every level,
and sub-categories (algal types) must sum to their parent classes. A
failure means the code tables or the category universe are wrong, so it
raises instead of continuing with a biased report.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
from reef_survey.errors import CoverTotalError


def _describe(bad: pd.DataFrame, group_cols: list[str], limit: int = 5) -> str:
    rows = []
    for _, r in bad.head(limit).iterrows():
        key = ", ".join(f"{c}={r[c]}" for c in group_cols)
        rows.append(f"({key}) -> {r['total']:.6f}")
    more = f" (+{len(bad) - limit} more)" if len(bad) > limit else ""
    return "; ".join(rows) + more


def category_totals(df: pd.DataFrame, group_cols: list[str], value_col: str = "mean") -> pd.DataFrame:
    return df.groupby(group_cols, sort=True)[value_col].sum().rename("total").reset_index()


def check_cover_totals(
    df: pd.DataFrame,
    group_cols: list[str],
    value_col: str = "mean",
    expected: float = 100.0,
    tolerance: float = 1e-6,
    label: str = "cover",
) -> pd.DataFrame:
    """
    Verify that category values sum to `expected` within every grouping key.

    Returns the per-key totals; raises CoverTotalError listing offending keys.
    """
    totals = category_totals(df, group_cols, value_col)
    bad = totals[(totals["total"] - expected).abs() > tolerance]
    if not bad.empty:
        raise CoverTotalError(
            f"{label}: category totals differ from {expected:g} by more than {tolerance:g}: "
            f"{_describe(bad, group_cols)}"
        )
    return totals


def check_parent_totals(
    sub: pd.DataFrame,
    parent: pd.DataFrame,
    group_cols: list[str],
    sub_category_col: str,
    parent_category_col: str,
    parent_categories: Iterable[str],
    exclude_sub: Iterable[str] = (),
    value_col: str = "mean",
    tolerance: float = 1e-6,
    label: str = "sub-category cover",
) -> pd.DataFrame:
    """
    Verify that sub-category values sum to the sum of their parent categories.

    `exclude_sub` names sub-categories that are not children of the parents
    (e.g. the "Non-algal" remainder). Returns the merged totals.
    """
    s = sub[~sub[sub_category_col].isin(list(exclude_sub))]
    p = parent[parent[parent_category_col].isin(list(parent_categories))]
    s_tot = category_totals(s, group_cols, value_col).rename(columns={"total": "sub_total"})
    p_tot = category_totals(p, group_cols, value_col).rename(columns={"total": "parent_total"})
    both = s_tot.merge(p_tot, on=group_cols, how="outer").fillna({"sub_total": 0.0, "parent_total": 0.0})
    both["total"] = both["sub_total"] - both["parent_total"]
    bad = both[both["total"].abs() > tolerance]
    if not bad.empty:
        raise CoverTotalError(
            f"{label}: sub-category sums differ from parent sums (difference shown): "
            f"{_describe(bad, group_cols)}"
        )
    return both
