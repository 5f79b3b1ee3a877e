"""
Benthic loader

Reads point-intercept rows (one row per point under the transect tape)
and produces a canonical DataFrame with `site`, `transect`, `meter`,
`point`, upper-cased `code` and, when recorded, `condition`.

Example
-------
>>> from pathlib import Path
>>> from reef_survey.config import load_analysis_config
>>> root = Path('.')
>>> df = load_benthic(root, load_analysis_config(root))
"""

from pathlib import Path

import pandas as pd
from reef_survey.config import get_sites_include
from reef_survey.loaders.workbook import load_sheet, normalize_codes


def load_benthic(root: Path, analysis_cfg: dict, workbook: Path | None = None) -> pd.DataFrame:
    df = load_sheet(root, analysis_cfg, "benthic", workbook, get_sites_include(analysis_cfg))
    df["code"] = normalize_codes(df["code"])
    # a point with no code was not read and is not part of any denominator
    df = df.dropna(subset=["code"])
    if "condition" in df.columns:
        df["condition"] = normalize_codes(df["condition"])
    else:
        df["condition"] = pd.Series(pd.NA, index=df.index, dtype="string")
    return df.reset_index(drop=True)
