"""
Workbook sheet reader shared by the per-dataset loaders.

Opens the survey workbook, resolves the configured sheet, normalizes
headers to snake_case, applies config renames, drops administrative
columns, enforces required columns and drops rows without a grouping key.
Missing sheets and columns raise immediately so a run never continues on
partial input.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import pandas as pd
from reef_survey.config import get_source_settings, get_workbook_path, validate_source_settings
from reef_survey.errors import MissingColumnError, MissingSheetError, SurveyDataError

KEY_COLUMNS = ("site", "transect", "meter", "point")


def normalize_header(name: Any) -> str:
    """
    Normalize a raw header: trimmed, lower-case, runs of non-alphanumerics
    collapsed to a single underscore.

    >>> normalize_header(" Transect # ")
    'transect'
    >>> normalize_header("Length (cm)")
    'length_cm'
    """
    text = str(name).strip().lower()
    text = re.sub(r"[^0-9a-z]+", "_", text)
    return text.strip("_")


def normalize_columns(df: pd.DataFrame, rename: dict[str, str] | None = None) -> pd.DataFrame:
    df = df.rename(columns={c: normalize_header(c) for c in df.columns})
    if rename:
        m = {normalize_header(k): v for k, v in rename.items()}
        # an alias never overwrites a column that already carries the canonical name
        m = {k: v for k, v in m.items() if k in df.columns and v not in df.columns}
        df = df.rename(columns=m)
    return df


def normalize_codes(s: pd.Series) -> pd.Series:
    """
    Upper-case and trim code values; blanks become missing.
    """
    out = s.astype("string").str.strip().str.upper()
    return out.mask(out == "")


def _normalize_key(s: pd.Series) -> pd.Series:
    as_text = s.astype("string").str.strip()
    as_text = as_text.mask(as_text == "")
    numeric = pd.to_numeric(as_text, errors="coerce")
    if as_text.notna().any() and numeric[as_text.notna()].notna().all():
        whole = (numeric.dropna() % 1 == 0).all()
        return numeric.astype("Int64") if whole else numeric
    return as_text


def keep_sites(df: pd.DataFrame, sites: list[Any], sheet: str = "survey") -> pd.DataFrame:
    """
    Filter rows to sites present in `sites`; an empty list keeps all rows.
    Returns a copy; if `site` column is missing, returns input.

    Site IDs are compared as text normalized like the sheet keys, so
    `include: [1]` matches a sheet whose site column holds 1. An include
    entry that matches no site raises SurveyDataError.
    """
    if not sites or "site" not in df.columns:
        return df
    wanted = _normalize_key(pd.Series(list(sites), dtype=object)).astype("string")
    absent = sorted({str(s) for s in wanted.dropna()} - {str(s) for s in df["site"].dropna()})
    if absent:
        raise SurveyDataError(
            f"analysis.yml:survey.sites.include: site(s) not found in sheet '{sheet}': {', '.join(absent)}"
        )
    return df[df["site"].isin(list(wanted.dropna()))].copy()


def require_non_negative(df: pd.DataFrame, columns: list[str], sheet: str) -> None:
    for c in columns:
        if c in df.columns and (df[c] < 0).any():
            n = int((df[c] < 0).sum())
            raise SurveyDataError(f"sheet '{sheet}': {n} negative value(s) in column '{c}'")


def read_survey_sheet(path: Path, settings: dict[str, Any], source: str) -> pd.DataFrame:
    """
    Read one survey sheet into a normalized DataFrame.

    Parameters
    ----------
    path : Path
        Survey workbook (.xlsx).
    settings : dict
        Loader settings from `get_source_settings`.
    source : str
        Source name used in error messages.

    Returns
    -------
    pd.DataFrame
        Rows with non-null grouping keys, admin columns removed.

    Raises
    ------
    FileNotFoundError
        If the workbook does not exist.
    MissingSheetError
        If the configured sheet is absent (matched case-insensitively).
    MissingColumnError
        If a required column is absent after normalization.
    """
    settings = validate_source_settings(settings, source)
    if not path.exists():
        raise FileNotFoundError(f"Survey workbook not found: {path}")

    sheet = settings["sheet_name"]
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        by_name = {s.strip().lower(): s for s in xls.sheet_names}
        actual = by_name.get(sheet.strip().lower())
        if actual is None:
            raise MissingSheetError(sheet, path, xls.sheet_names)
        df = pd.read_excel(xls, sheet_name=actual)

    df = normalize_columns(df, settings.get("rename"))
    drop = [c for c in settings.get("drop_columns", []) if c in df.columns]
    df = df.drop(columns=drop)

    required = settings["required_columns"]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise MissingColumnError(sheet, missing)

    keys = [c for c in KEY_COLUMNS if c in required]
    for k in keys:
        df[k] = _normalize_key(df[k])
    # rows without a full grouping key are not observations
    n_rows = len(df)
    df = df.dropna(subset=keys)
    df.attrs["dropped_rows"] = n_rows - len(df)
    if "site" in df.columns:
        df["site"] = df["site"].astype("string")
    return df.reset_index(drop=True)


def load_sheet(root: Path, analysis_cfg: dict, source: str, workbook: Path | None = None,
               sites: list[str] | None = None) -> pd.DataFrame:
    """
    Resolve workbook and settings from config, read the sheet, filter sites.
    """
    path = workbook or get_workbook_path(analysis_cfg, root)
    settings = get_source_settings(analysis_cfg, source)
    df = read_survey_sheet(path, settings, source)
    return keep_sites(df, sites or [], settings["sheet_name"])
