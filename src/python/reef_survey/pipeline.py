"""
Survey pipeline.

Loads every sheet before aggregating anything, so a missing sheet or
column aborts the run before a single artifact is written.

Example
-------
>>> from pathlib import Path
>>> from reef_survey.config import load_analysis_config
>>> root = Path('.')
>>> cfg = load_analysis_config(root)
>>> survey = load_survey(root, cfg)
>>> results = compute_metrics(root, cfg, survey)
>>> results["benthic"]["benthic_class"]["site"].head()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from reef_survey.aggregate.enrich import load_metadata
from reef_survey.classify import load_code_tables
from reef_survey.config import (
    get_aggregation_settings,
    get_classification_settings,
    get_unit_settings,
)
from reef_survey.loaders import load_benthic, load_fish, load_macroinvertebrates, load_rugosity
from reef_survey.metrics import benthic_metrics, fish_metrics, invert_metrics, rugosity_metrics

Results = dict[str, dict[str, dict[str, pd.DataFrame]]]


def load_survey(root: Path, analysis_cfg: dict[str, Any], workbook: Path | None = None) -> dict[str, pd.DataFrame]:
    return {
        "benthic": load_benthic(root, analysis_cfg, workbook),
        "fish": load_fish(root, analysis_cfg, workbook),
        "macroinvertebrates": load_macroinvertebrates(root, analysis_cfg, workbook),
        "rugosity": load_rugosity(root, analysis_cfg, workbook),
    }


def compute_metrics(root: Path, analysis_cfg: dict[str, Any], survey: dict[str, pd.DataFrame]) -> Results:
    """
    Classify, aggregate and validate every dataset.

    Returns {dataset: {metric: {level: table}}}.
    """
    tables = load_code_tables(root)
    settings = get_classification_settings(analysis_cfg)
    units = get_unit_settings(analysis_cfg)
    agg = get_aggregation_settings(analysis_cfg)
    benthic_meta = load_metadata(root, "benthic_codes")
    fish_meta = load_metadata(root, "fish_species")
    invert_meta = load_metadata(root, "invert_species")

    return {
        "benthic": benthic_metrics(survey["benthic"], tables, benthic_meta, settings, agg),
        "fish": fish_metrics(survey["fish"], tables, fish_meta, settings, units, agg),
        "macroinvertebrates": invert_metrics(survey["macroinvertebrates"], tables, invert_meta,
                                             settings, units, agg),
        "rugosity": rugosity_metrics(survey["rugosity"], agg),
    }

