# tests/test_classify.py
import dataclasses

import pandas as pd
import pytest

from reef_survey.classify import UNCLASSIFIED, CodeTables, classify, unmapped_codes
from reef_survey.errors import UnmappedCodeError, UnmappedCodeWarning


def _points():
    return pd.DataFrame({
        "site": ["A", "A", "A", "A"],
        "code": pd.array(["OFAV", "DICT", "ZZZZ", None], dtype="string"),
    })


def test_known_codes_map_to_class(code_tables):
    with pytest.warns(UnmappedCodeWarning):
        out = classify(_points(), "code", code_tables.benthic_class, "benthic_class", "benthic_class")

    assert out["benthic_class"].iloc[0] == "Hard coral"
    assert out["benthic_class"].iloc[1] == "Macroalgae"
    assert pd.isna(out["benthic_class"].iloc[3])


def test_warn_policy_marks_unclassified(code_tables):
    with pytest.warns(UnmappedCodeWarning, match="ZZZZ"):
        out = classify(_points(), "code", code_tables.benthic_class, "benthic_class", "benthic_class",
                       policy="warn")

    assert len(out) == 4
    assert out["benthic_class"].iloc[2] == UNCLASSIFIED


def test_error_policy_raises(code_tables):
    with pytest.raises(UnmappedCodeError) as excinfo:
        classify(_points(), "code", code_tables.benthic_class, "benthic_class", "benthic_class",
                 policy="error")

    assert excinfo.value.codes == ["ZZZZ"]


def test_exclude_policy_drops_rows(code_tables):
    out = classify(_points(), "code", code_tables.benthic_class, "benthic_class", "benthic_class",
                   policy="exclude")

    assert "ZZZZ" not in set(out["code"].dropna())
    assert len(out) == 3


def test_classify_returns_copy(code_tables):
    points = _points()
    classify(points, "code", code_tables.benthic_class, "benthic_class", "benthic_class", policy="exclude")

    assert "benthic_class" not in points.columns


def test_unmapped_codes_lists_distinct_sorted(code_tables):
    df = pd.DataFrame({"code": ["ZZZZ", "OFAV", "AAAA", "ZZZZ", None]})

    assert unmapped_codes(df, "code", code_tables.benthic_class) == ["AAAA", "ZZZZ"]


def test_tables_are_read_only(code_tables):
    with pytest.raises(TypeError):
        code_tables.benthic_class["OFAV"] = "Sponge"
    with pytest.raises(dataclasses.FrozenInstanceError):
        code_tables.benthic_class = {}


def test_from_dict_upper_cases_codes():
    tables = CodeTables.from_dict({"benthic_class": {"ofav ": "Hard coral"}})

    assert tables.benthic_class["OFAV"] == "Hard coral"
    assert dict(tables.fish_functional_group) == {}


def test_conflicting_codes_raise():
    with pytest.raises(ValueError, match="OFAV"):
        CodeTables.from_dict({"benthic_class": {"OFAV": "Hard coral", "ofav": "Sponge"}})


def test_unknown_table_name_raises(code_tables):
    with pytest.raises(KeyError):
        code_tables.table("nope")
