"""
Macroinvertebrate loader

Reads belt-transect counts of urchins and other macroinvertebrates.
Rows with a blank species mark transects surveyed with nothing seen.
"""

from pathlib import Path

import pandas as pd
from reef_survey.config import get_sites_include
from reef_survey.errors import SurveyDataError
from reef_survey.loaders.workbook import load_sheet, normalize_codes, require_non_negative


def load_macroinvertebrates(root: Path, analysis_cfg: dict, workbook: Path | None = None) -> pd.DataFrame:
    df = load_sheet(root, analysis_cfg, "macroinvertebrates", workbook, get_sites_include(analysis_cfg))
    df["species"] = normalize_codes(df["species"])
    df["count"] = pd.to_numeric(df["count"], errors="coerce")
    seen = df["species"].notna()
    if (seen & df["count"].isna()).any():
        n = int((seen & df["count"].isna()).sum())
        raise SurveyDataError(f"sheet 'macroinvertebrates': {n} row(s) with a species but no count")
    require_non_negative(df, ["count"], "macroinvertebrates")
    df.loc[~seen, "count"] = 0
    return df.reset_index(drop=True)
