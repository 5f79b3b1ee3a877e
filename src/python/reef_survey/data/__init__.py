"""Data I/O utilities for loading and saving artifacts."""

from reef_survey.data.io import (
    load_results,
    save_parquet,
    save_results,
    save_summary_json,
)

__all__ = [
    "load_results",
    "save_parquet",
    "save_results",
    "save_summary_json",
]
