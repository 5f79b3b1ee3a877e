"""
Report figures.

Grouped bar charts of site means with SE error bars and regional
benchmark lines, stacked cover composition, and transect-level spread.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns


def plot_site_means(
    site_df: pd.DataFrame,
    category_col: str,
    output_path: Path,
    title: str,
    ylabel: str,
    benchmarks: dict[str, float] | None = None,
    categories: list[str] | None = None,
    figsize: tuple[float, float] = (10, 6),
    dpi: int = 200,
) -> Path:
    """
    Grouped bars: one group per category, one bar per site, SE error bars.

    Categories with a benchmark get a dashed reference line across their group.
    """
    categories = categories or sorted(site_df[category_col].unique())
    sites = sorted(site_df["site"].unique())
    palette = sns.color_palette("deep", max(len(sites), 1))
    width = 0.8 / max(len(sites), 1)
    x = np.arange(len(categories))

    fig, ax = plt.subplots(figsize=figsize)
    for i, site in enumerate(sites):
        sub = site_df[site_df["site"] == site].set_index(category_col).reindex(categories)
        offset = (i - (len(sites) - 1) / 2) * width
        ax.bar(
            x + offset,
            sub["mean"].fillna(0).values,
            width,
            yerr=sub["se"].fillna(0).values,
            capsize=3,
            color=palette[i],
            edgecolor="black",
            linewidth=0.5,
            label=str(site),
        )

    labelled = False
    for j, category in enumerate(categories):
        if benchmarks and category in benchmarks:
            ax.hlines(benchmarks[category], x[j] - 0.45, x[j] + 0.45, colors="black", linestyles="--",
                      linewidth=1.5, label=None if labelled else "Regional benchmark")
            labelled = True

    ax.set_xticks(x)
    ax.set_xticklabels(categories, rotation=30, ha="right")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.set_ylim(bottom=0)
    ax.legend(frameon=False, fontsize=9)
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path


def plot_composition(
    site_df: pd.DataFrame,
    category_col: str,
    output_path: Path,
    title: str,
    figsize: tuple[float, float] = (10, 6),
    dpi: int = 200,
) -> Path:
    """
    Stacked bars of mean cover per site (each bar sums to 100 %).
    """
    pivot = site_df.pivot(index="site", columns=category_col, values="mean").fillna(0).sort_index()
    palette = sns.color_palette("tab20", max(len(pivot.columns), 1))

    fig, ax = plt.subplots(figsize=figsize)
    bottom = np.zeros(len(pivot))
    for i, category in enumerate(pivot.columns):
        values = pivot[category].values
        ax.bar(pivot.index.astype(str), values, bottom=bottom, color=palette[i], label=category,
               edgecolor="white", linewidth=0.5)
        bottom += values

    ax.set_ylabel("Cover (%)")
    ax.set_xlabel("Site")
    ax.set_ylim(0, 100)
    ax.set_title(title)
    ax.legend(bbox_to_anchor=(1.02, 1), loc="upper left", frameon=False, fontsize=8)
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path


def plot_transect_spread(
    transect_df: pd.DataFrame,
    category_col: str,
    category: str,
    output_path: Path,
    ylabel: str,
    benchmark: float | None = None,
    figsize: tuple[float, float] = (8, 5),
    dpi: int = 200,
) -> Path:
    """
    Transect means of one category per site with the site mean ± SE.
    """
    data = transect_df[transect_df[category_col] == category].copy()
    data["site"] = data["site"].astype(str)
    order = sorted(data["site"].unique())

    fig, ax = plt.subplots(figsize=figsize)
    sns.stripplot(data=data, x="site", y="mean", order=order, color="steelblue", alpha=0.7, size=6, ax=ax)
    sns.pointplot(data=data, x="site", y="mean", order=order, errorbar="se", color="black",
                  linestyle="none", markers="D", capsize=0.15, ax=ax)
    if benchmark is not None:
        ax.axhline(benchmark, color="red", linestyle="--", linewidth=1, label="Regional benchmark")
        ax.legend(frameon=False, fontsize=9)
    ax.set_xlabel("Site")
    ax.set_ylabel(ylabel)
    ax.set_title(f"{category}: transect means by site")
    plt.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path
