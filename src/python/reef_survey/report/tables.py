"""
Summary tables for the report.
"""

from __future__ import annotations

import numpy as np
import pandas as pd


def format_mean_se(mean: float, se: float, decimals: int = 1) -> str:
    """
    >>> format_mean_se(45.0, 3.5355, 1)
    '45.0 ± 3.5'
    >>> format_mean_se(12.0, float("nan"), 1)
    '12.0'
    """
    if pd.isna(mean):
        return ""
    if pd.isna(se):
        return f"{mean:.{decimals}f}"
    return f"{mean:.{decimals}f} ± {se:.{decimals}f}"


def site_summary_table(site_df: pd.DataFrame, category_col: str, decimals: int = 1,
                       label: str | None = None) -> pd.DataFrame:
    """
    Wide table of "mean ± SE" with one row per category and one column per site.

    `label` replaces the category column header when given.
    """
    df = site_df.copy()
    df["value"] = [format_mean_se(m, s, decimals) for m, s in zip(df["mean"], df["se"])]
    wide = df.pivot(index=category_col, columns="site", values="value").reset_index()
    wide.columns.name = None
    if label:
        wide = wide.rename(columns={category_col: label})
    return wide


def benchmark_table(site_df: pd.DataFrame, category_col: str, benchmarks: dict[str, float],
                    decimals: int = 1) -> pd.DataFrame:
    """
    Site means next to regional benchmarks for categories that have one.

    Returns columns: category, site, mean, se, benchmark, difference, relative.
    """
    cols = [category_col, "site", "mean", "se", "benchmark", "difference", "relative"]
    if not benchmarks:
        return pd.DataFrame(columns=cols)
    df = site_df[site_df[category_col].isin(list(benchmarks))].copy()
    df["benchmark"] = df[category_col].map(benchmarks).astype(float)
    df["difference"] = df["mean"] - df["benchmark"]
    df["relative"] = np.where(df["difference"] >= 0, "at or above", "below")
    for c in ["mean", "se", "benchmark", "difference"]:
        df[c] = df[c].round(decimals)
    return df[cols].sort_values([category_col, "site"]).reset_index(drop=True)


def comparison_table(comparison: pd.DataFrame, category_col: str) -> pd.DataFrame:
    out = comparison.copy()
    out["h_statistic"] = out["h_statistic"].round(2)
    out["p_value"] = out["p_value"].round(4)
    return out.rename(columns={category_col: "category"})
