"""
Between-site comparison of transect-level values.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats


def compare_sites(transect_df: pd.DataFrame, category_col: str, value_col: str = "mean",
                  site_col: str = "site") -> pd.DataFrame:
    """
    Kruskal-Wallis H test across sites for each category.

    Returns columns: category_col, n_sites, h_statistic, p_value. Categories
    with fewer than two sites, or with identical values everywhere, get NaN.
    """
    rows = []
    for category, sub in transect_df.groupby(category_col, sort=True):
        groups = [g[value_col].dropna().to_numpy() for _, g in sub.groupby(site_col, sort=True)]
        groups = [g for g in groups if len(g) > 0]
        h, p = np.nan, np.nan
        if len(groups) >= 2 and np.unique(np.concatenate(groups)).size > 1:
            h, p = stats.kruskal(*groups)
        rows.append({
            category_col: category,
            "n_sites": len(groups),
            "h_statistic": float(h),
            "p_value": float(p),
        })
    return pd.DataFrame(rows, columns=[category_col, "n_sites", "h_statistic", "p_value"])
