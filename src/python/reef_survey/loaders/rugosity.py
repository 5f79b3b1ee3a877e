"""
Rugosity loader

Reads maximum vertical relief (cm) recorded per meter along each transect.
"""

from pathlib import Path

import pandas as pd
from reef_survey.config import get_sites_include
from reef_survey.loaders.workbook import load_sheet, require_non_negative


def load_rugosity(root: Path, analysis_cfg: dict, workbook: Path | None = None) -> pd.DataFrame:
    df = load_sheet(root, analysis_cfg, "rugosity", workbook, get_sites_include(analysis_cfg))
    df["relief_cm"] = pd.to_numeric(df["relief_cm"], errors="coerce")
    df = df.dropna(subset=["relief_cm"])
    require_non_negative(df, ["relief_cm"], "rugosity")
    return df.reset_index(drop=True)
