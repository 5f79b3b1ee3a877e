"""Shared fixtures for the reef survey test suite.

Fixtures build small survey frames in loader-output shape and a temporary
workbook with the same content, so aggregation tests and loader tests use
one set of numbers.
"""

import shutil
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from reef_survey.aggregate.enrich import load_metadata
from reef_survey.classify import load_code_tables
from reef_survey.config import (
    get_aggregation_settings,
    get_classification_settings,
    get_unit_settings,
    load_analysis_config,
)

REPO_ROOT = Path(__file__).resolve().parent.parent


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def repo_root():
    return REPO_ROOT


@pytest.fixture
def analysis_cfg():
    return load_analysis_config(REPO_ROOT)


@pytest.fixture
def code_tables():
    return load_code_tables(REPO_ROOT)


@pytest.fixture
def classification(analysis_cfg):
    return get_classification_settings(analysis_cfg)


@pytest.fixture
def units(analysis_cfg):
    return get_unit_settings(analysis_cfg)


@pytest.fixture
def agg(analysis_cfg):
    return get_aggregation_settings(analysis_cfg)


@pytest.fixture
def benthic_meta():
    return load_metadata(REPO_ROOT, "benthic_codes")


@pytest.fixture
def fish_meta():
    return load_metadata(REPO_ROOT, "fish_species")


@pytest.fixture
def invert_meta():
    return load_metadata(REPO_ROOT, "invert_species")


@pytest.fixture
def project_root(tmp_path):
    """Temporary project root with a copy of config/ for stage outputs."""
    shutil.copytree(REPO_ROOT / "config", tmp_path / "config")
    return tmp_path


# =============================================================================
# Survey frames
# =============================================================================

def make_points(units: dict, conditions: dict | None = None) -> pd.DataFrame:
    """Benthic points from {(site, transect, meter): [code, ...]}.

    `conditions` maps (site, transect, meter, point) to a condition code.
    """
    conditions = conditions or {}
    rows = []
    for (site, transect, meter), codes in units.items():
        for point, code in enumerate(codes, start=1):
            rows.append({
                "site": site,
                "transect": transect,
                "meter": meter,
                "point": point,
                "code": code,
                "condition": conditions.get((site, transect, meter, point)),
            })
    df = pd.DataFrame(rows)
    df["code"] = df["code"].astype("string")
    df["condition"] = df["condition"].astype("string")
    return df


BENTHIC_UNITS = {
    ("A", 1, 1): ["OFAV", "OFAV", "DICT", "TURF", "SAND"],
    ("A", 1, 2): ["CCA", "TURF", "TURF", "HALI"],
    ("A", 2, 1): ["PAST", "TSED", "SPON", "HOLE"],
    ("A", 2, 2): ["SAND", "SAND"],
    ("B", 1, 1): ["OFAV", "LOBO"],
}
BENTHIC_CONDITIONS = {("A", 1, 1, 1): "BL"}


@pytest.fixture
def benthic_points():
    return make_points(BENTHIC_UNITS, BENTHIC_CONDITIONS)


@pytest.fixture
def fish_rows():
    return pd.DataFrame({
        "site": ["A", "A", "A", "B"],
        "transect": [1, 1, 2, 1],
        "species": pd.array(["SPVI", "LUAP", None, "SCIS"], dtype="string"),
        "length_cm": [20.0, 30.0, np.nan, 10.0],
        "count": [2.0, 1.0, 0.0, 3.0],
    })


@pytest.fixture
def invert_rows():
    return pd.DataFrame({
        "site": ["A", "A", "A", "B"],
        "transect": [1, 1, 2, 1],
        "species": pd.array(["DIAN", "ECVI", "DIAN", None], dtype="string"),
        "count": [3.0, 1.0, 1.0, 0.0],
    })


@pytest.fixture
def rugosity_rows():
    return pd.DataFrame({
        "site": ["A", "A", "A", "A", "B"],
        "transect": [1, 1, 2, 2, 1],
        "meter": [1, 2, 1, 1, 1],
        "relief_cm": [30.0, 50.0, 20.0, 40.0, 60.0],
    })


# =============================================================================
# Workbook
# =============================================================================

def _raw_sheets(points, fish, inverts, rugosity) -> dict[str, pd.DataFrame]:
    benthic = points.rename(columns={
        "site": "Site", "transect": "Transect", "meter": "Meter", "point": "Point",
        "code": "Code", "condition": "Condition",
    }).copy()
    benthic["Code"] = benthic["Code"].str.lower()
    benthic["Date"] = "2024-05-01"
    benthic["Surveyor"] = "JD"
    # no site recorded: dropped by the loader
    benthic = pd.concat([benthic, pd.DataFrame([{"Site": None, "Transect": 1, "Meter": 1, "Point": 9,
                                                 "Code": "OFAV"}])], ignore_index=True)

    fish_sheet = fish.rename(columns={"length_cm": "Length (cm)", "count": "Number"}).copy()
    fish_sheet["Notes"] = ""
    return {
        "Benthic": benthic,
        "Fish": fish_sheet,
        "Macroinvertebrates": inverts.copy(),
        "Rugosity": rugosity.rename(columns={"relief_cm": "Max Relief"}),
    }


def write_workbook(path: Path, sheets: dict[str, pd.DataFrame]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.fixture
def raw_sheets(benthic_points, fish_rows, invert_rows, rugosity_rows):
    return _raw_sheets(benthic_points, fish_rows, invert_rows, rugosity_rows)


@pytest.fixture
def workbook(tmp_path, raw_sheets):
    return write_workbook(tmp_path / "survey.xlsx", raw_sheets)
