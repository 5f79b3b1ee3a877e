# tests/test_loaders.py
import pandas as pd
import pytest

from conftest import write_workbook
from reef_survey.config import get_source_settings
from reef_survey.errors import MissingColumnError, MissingSheetError, SurveyDataError
from reef_survey.loaders import load_benthic, load_fish, load_macroinvertebrates, load_rugosity
from reef_survey.loaders.workbook import normalize_columns, normalize_header, read_survey_sheet


def test_normalize_header():
    assert normalize_header(" Transect # ") == "transect"
    assert normalize_header("Length (cm)") == "length_cm"
    assert normalize_header("Max Relief") == "max_relief"


def test_rename_does_not_overwrite_canonical_column():
    df = pd.DataFrame(columns=["Code", "Category"])

    out = normalize_columns(df, {"category": "code"})

    assert out.columns.tolist() == ["code", "category"]


def test_load_benthic(repo_root, analysis_cfg, workbook):
    df = load_benthic(repo_root, analysis_cfg, workbook)

    # the row without a site is dropped
    assert len(df) == 17
    assert set(df["site"]) == {"A", "B"}
    assert "date" not in df.columns
    assert "surveyor" not in df.columns
    assert set(df["code"]) >= {"OFAV", "SAND", "TSED"}
    assert str(df["transect"].dtype) == "Int64"
    assert df["condition"].dropna().tolist() == ["BL"]


def test_load_fish_keeps_empty_transect(repo_root, analysis_cfg, workbook):
    df = load_fish(repo_root, analysis_cfg, workbook)

    assert "notes" not in df.columns
    assert {"length_cm", "count"} <= set(df.columns)
    empty = df[df["species"].isna()]
    assert len(empty) == 1
    assert empty["count"].iloc[0] == 0
    assert empty["transect"].iloc[0] == 2


def test_load_macroinvertebrates(repo_root, analysis_cfg, workbook):
    df = load_macroinvertebrates(repo_root, analysis_cfg, workbook)

    assert df["count"].sum() == 5
    assert df["species"].isna().sum() == 1


def test_load_rugosity_renames_relief(repo_root, analysis_cfg, workbook):
    df = load_rugosity(repo_root, analysis_cfg, workbook)

    assert df["relief_cm"].tolist() == [30.0, 50.0, 20.0, 40.0, 60.0]


def test_sites_include_filters(repo_root, analysis_cfg, workbook):
    analysis_cfg["survey"]["sites"]["include"] = ["B"]

    df = load_rugosity(repo_root, analysis_cfg, workbook)

    assert set(df["site"]) == {"B"}


def test_sites_include_matches_numeric_site_ids(repo_root, analysis_cfg, tmp_path, raw_sheets):
    rugosity = raw_sheets["Rugosity"].copy()
    rugosity["site"] = rugosity["site"].map({"A": 1, "B": 2})
    raw_sheets["Rugosity"] = rugosity
    path = write_workbook(tmp_path / "numeric_sites.xlsx", raw_sheets)
    analysis_cfg["survey"]["sites"]["include"] = [1]

    df = load_rugosity(repo_root, analysis_cfg, path)

    assert set(df["site"]) == {"1"}
    assert len(df) == (rugosity["site"] == 1).sum()


def test_sites_include_unknown_site_raises(repo_root, analysis_cfg, workbook):
    analysis_cfg["survey"]["sites"]["include"] = ["B", "Z"]

    with pytest.raises(SurveyDataError, match="not found in sheet 'rugosity': Z"):
        load_rugosity(repo_root, analysis_cfg, workbook)


def test_missing_sheet_fails_fast(repo_root, analysis_cfg, tmp_path, raw_sheets):
    del raw_sheets["Rugosity"]
    path = write_workbook(tmp_path / "partial.xlsx", raw_sheets)

    with pytest.raises(MissingSheetError) as excinfo:
        load_rugosity(repo_root, analysis_cfg, path)

    assert excinfo.value.sheet == "rugosity"
    assert "Benthic" in excinfo.value.available


def test_missing_column_fails_fast(repo_root, analysis_cfg, tmp_path, raw_sheets):
    raw_sheets["Fish"] = raw_sheets["Fish"].drop(columns=["Length (cm)"])
    path = write_workbook(tmp_path / "no_length.xlsx", raw_sheets)

    with pytest.raises(MissingColumnError) as excinfo:
        load_fish(repo_root, analysis_cfg, path)

    assert excinfo.value.missing == ["length_cm"]


def test_negative_count_raises(repo_root, analysis_cfg, tmp_path, raw_sheets):
    raw_sheets["Macroinvertebrates"].loc[0, "count"] = -1
    path = write_workbook(tmp_path / "negative.xlsx", raw_sheets)

    with pytest.raises(SurveyDataError, match="negative"):
        load_macroinvertebrates(repo_root, analysis_cfg, path)


def test_fish_row_without_length_raises(repo_root, analysis_cfg, tmp_path, raw_sheets):
    raw_sheets["Fish"].loc[0, "Length (cm)"] = None
    path = write_workbook(tmp_path / "no_length_value.xlsx", raw_sheets)

    with pytest.raises(SurveyDataError, match="length_cm"):
        load_fish(repo_root, analysis_cfg, path)


def test_missing_workbook_raises(repo_root, analysis_cfg, tmp_path):
    with pytest.raises(FileNotFoundError):
        load_benthic(repo_root, analysis_cfg, tmp_path / "absent.xlsx")


def test_dropped_key_rows_are_counted(analysis_cfg, workbook):
    settings = get_source_settings(analysis_cfg, "benthic")

    df = read_survey_sheet(workbook, settings, "benthic")

    assert df.attrs["dropped_rows"] == 1
