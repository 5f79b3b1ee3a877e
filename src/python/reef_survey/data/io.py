"""
Common I/O functions for loading and saving data artifacts.

Aggregate tables are written as one parquet file per
dataset/metric/level under data/processed/, indexed by a JSON manifest
so the report stage can reload exactly what the metrics stage produced.
"""

from pathlib import Path
import json

import pandas as pd

from reef_survey.paths import processed_artifact_path, processed_dir

MANIFEST_NAME = "manifest.json"


def save_parquet(df: pd.DataFrame, path: Path) -> None:
    """
    Save DataFrame to parquet with consistent settings.

    Creates parent directories if needed.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to save.
    path : Path
        Output file path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False)


def save_summary_json(summary: dict, path: Path) -> None:
    """
    Save summary dictionary to JSON with consistent formatting.

    Creates parent directories if needed. Non-JSON scalars (numpy, pandas)
    are written via str().
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(summary, f, indent=2, default=str)


def save_results(root: Path, results: dict) -> dict:
    """
    Write every aggregate table and the manifest.

    Parameters
    ----------
    root : Path
        Project root directory.
    results : dict
        {dataset: {metric: {level: DataFrame}}} from `compute_metrics`.

    Returns
    -------
    dict
        Manifest {dataset: {metric: {level: relative path}}}.
    """
    manifest: dict = {}
    for dataset, metrics in results.items():
        for metric, levels in metrics.items():
            for level, df in levels.items():
                path = processed_artifact_path(root, dataset, metric, level)
                save_parquet(df, path)
                manifest.setdefault(dataset, {}).setdefault(metric, {})[level] = str(path.relative_to(root))
    save_summary_json(manifest, processed_dir(root) / MANIFEST_NAME)
    return manifest


def load_results(root: Path) -> dict:
    """
    Load every table listed in data/processed/manifest.json.

    Raises
    ------
    FileNotFoundError
        If the manifest or a listed table does not exist.
    """
    manifest_path = processed_dir(root) / MANIFEST_NAME
    if not manifest_path.exists():
        raise FileNotFoundError(f"Processed manifest not found: {manifest_path}")
    with open(manifest_path) as f:
        manifest = json.load(f)

    results: dict = {}
    for dataset, metrics in manifest.items():
        for metric, levels in metrics.items():
            for level, rel in levels.items():
                path = root / rel
                if not path.exists():
                    raise FileNotFoundError(f"Processed file not found: {path}")
                results.setdefault(dataset, {}).setdefault(metric, {})[level] = pd.read_parquet(path)
    return results
