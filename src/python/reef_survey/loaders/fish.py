"""
Fish loader

Reads belt-transect fish counts (species code, total length in cm,
count) and produces a canonical DataFrame. A row with a site and
transect but no species marks a transect surveyed with no fish seen;
it is kept so the transect contributes zeros downstream.
"""

from pathlib import Path

import pandas as pd
from reef_survey.config import get_sites_include
from reef_survey.errors import SurveyDataError
from reef_survey.loaders.workbook import load_sheet, normalize_codes, require_non_negative


def load_fish(root: Path, analysis_cfg: dict, workbook: Path | None = None) -> pd.DataFrame:
    df = load_sheet(root, analysis_cfg, "fish", workbook, get_sites_include(analysis_cfg))
    df["species"] = normalize_codes(df["species"])
    df["length_cm"] = pd.to_numeric(df["length_cm"], errors="coerce")
    df["count"] = pd.to_numeric(df["count"], errors="coerce")

    seen = df["species"].notna()
    incomplete = seen & (df["length_cm"].isna() | df["count"].isna())
    if incomplete.any():
        raise SurveyDataError(
            f"sheet 'fish': {int(incomplete.sum())} row(s) with a species but no length_cm or count"
        )
    require_non_negative(df, ["length_cm", "count"], "fish")
    df.loc[~seen, "count"] = 0
    return df.reset_index(drop=True)
