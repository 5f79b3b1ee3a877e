"""
QA utilities for survey sampling effort.

Provides helpers to profile sheet columns, summarize per-site sampling
effort and list unmapped codes, write a summary JSON and plot effort.
Rendering uses matplotlib with dimensions from configuration.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import pandas as pd

from reef_survey.aggregate.cover import mark_available
from reef_survey.classify import UNCLASSIFIED, CodeTables, classify, unmapped_codes

EFFORT_COLUMNS = ["dataset", "site", "transects", "units", "records"]
SCHEMA_COLUMNS = ["dataset", "column", "dtype", "non_null_fraction", "distinct"]


def column_profile(df: pd.DataFrame, dataset: str) -> pd.DataFrame:
    """
    One row per column of a loaded survey sheet: dtype, share of non-null
    values and number of distinct non-null values.
    """
    if df.empty:
        return pd.DataFrame(columns=SCHEMA_COLUMNS)
    return pd.DataFrame({
        "dataset": dataset,
        "column": df.columns,
        "dtype": [str(t) for t in df.dtypes.values],
        "non_null_fraction": [float(df[c].notna().mean()) for c in df.columns],
        "distinct": [int(df[c].nunique(dropna=True)) for c in df.columns],
    })


def compute_schema(survey: dict[str, pd.DataFrame]) -> pd.DataFrame:
    frames = [column_profile(df, name) for name, df in survey.items() if not df.empty]
    if not frames:
        return pd.DataFrame(columns=SCHEMA_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def sampling_effort(survey: dict[str, pd.DataFrame]) -> pd.DataFrame:
    """
    Transects, sampling units and records per dataset and site.

    Sampling units are meters where the sheet has them, transects otherwise.
    Records count observed rows (empty-transect markers excluded).
    """
    rows = []
    for name, df in survey.items():
        if df.empty:
            continue
        unit_cols = ["site", "transect", "meter"] if "meter" in df.columns else ["site", "transect"]
        observed = df["species"].notna() if "species" in df.columns else pd.Series(True, index=df.index)
        for site, sub in df.groupby("site", sort=True):
            rows.append({
                "dataset": name,
                "site": site,
                "transects": int(sub[["site", "transect"]].drop_duplicates().shape[0]),
                "units": int(sub[unit_cols].drop_duplicates().shape[0]),
                "records": int(observed[sub.index].sum()),
            })
    return pd.DataFrame(rows, columns=EFFORT_COLUMNS)


def available_fraction(benthic: pd.DataFrame, tables: CodeTables, settings: dict[str, Any]) -> pd.DataFrame:
    """
    Share of benthic points per site that fall on available substrate.

    Codes are classed with the same unmapped-code policy as the benthic
    metrics: under "warn" an unmapped code is an available "Unclassified"
    point (counted in `unclassified`), under "exclude" it is not a point at
    all and under "error" UnmappedCodeError is raised.
    """
    if benthic.empty:
        return pd.DataFrame(columns=["site", "points", "unclassified", "available_fraction"])
    df = classify(benthic, "code", tables.benthic_class, "benthic_class", "benthic_class",
                  settings["unmapped_codes"])
    df = mark_available(df, "benthic_class", settings["unavailable_classes"])
    df["unclassified"] = df["benthic_class"] == UNCLASSIFIED
    g = df.groupby("site", sort=True)
    return pd.DataFrame({
        "points": g.size(),
        "unclassified": g["unclassified"].sum().astype(int),
        "available_fraction": g["available"].mean(),
    }).reset_index()


def unmapped_report(survey: dict[str, pd.DataFrame], tables: CodeTables) -> dict[str, list[str]]:
    """
    Codes in each sheet that are missing from their lookup table.
    """
    checks = {
        "benthic_class": ("benthic", "code"),
        "fish_functional_group": ("fish", "species"),
        "invert_group": ("macroinvertebrates", "species"),
    }
    out = {}
    for table, (dataset, col) in checks.items():
        df = survey.get(dataset)
        if df is None or df.empty:
            continue
        missing = unmapped_codes(df, col, tables.table(table))
        if missing:
            out[table] = missing
    return out


def plot_effort(effort: pd.DataFrame, out_png: Path, fig_size=(10, 6), dpi=200) -> None:
    plt.figure(figsize=fig_size, dpi=dpi)
    if effort.empty:
        plt.text(0.5, 0.5, "No survey data", ha="center", va="center")
        plt.axis("off")
        plt.savefig(out_png)
        plt.close()
        return
    pivot = effort.pivot_table(index="site", columns="dataset", values="transects", aggfunc="sum", fill_value=0)
    ax = plt.gca()
    pivot.plot(kind="bar", ax=ax, width=0.8)
    ax.set_ylabel("Transects surveyed")
    ax.set_xlabel("Site")
    ax.set_title("Sampling Effort by Site and Dataset")
    plt.xticks(rotation=45, ha="right")
    plt.tight_layout()
    plt.savefig(out_png)
    plt.close()


def write_summary_json(out_path: Path, rows: dict[str, int], effort: pd.DataFrame,
                       extra: dict[str, object] | None = None) -> None:
    payload = {
        "rows": rows,
        "effort": effort.to_dict(orient="records") if not effort.empty else [],
    }
    if extra:
        payload.update(extra)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w") as f:
        json.dump(payload, f, indent=2, default=str)
