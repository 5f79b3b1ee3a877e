# tests/test_grid.py
import pandas as pd
import pytest

from reef_survey.aggregate.grid import expand_grid


def _observed():
    return pd.DataFrame({
        "site": ["A", "A", "B"],
        "transect": [1, 2, 1],
        "species": ["SPVI", "LUAP", "SPVI"],
        "count": [2.0, 1.0, 4.0],
    })


def test_one_row_per_unit_and_category():
    grid = expand_grid(_observed(), ["site", "transect"], "species", ["count"])

    assert len(grid) == 3 * 2
    assert not grid.duplicated(["site", "transect", "species"]).any()


def test_absent_category_is_zero_not_missing():
    grid = expand_grid(_observed(), ["site", "transect"], "species", ["count"])

    row = grid[(grid["site"] == "A") & (grid["transect"] == 1) & (grid["species"] == "LUAP")]
    assert row["count"].tolist() == [0.0]
    assert not grid["count"].isna().any()


def test_universe_adds_unobserved_categories():
    grid = expand_grid(_observed(), ["site", "transect"], "species", ["count"],
                       universe=["SPVI", "LUAP", "SCIS"])

    assert set(grid["species"]) == {"SPVI", "LUAP", "SCIS"}
    assert grid.loc[grid["species"] == "SCIS", "count"].sum() == 0.0


def test_units_without_observations_get_zero_rows():
    units = pd.DataFrame({"site": ["A", "A", "B", "B"], "transect": [1, 2, 1, 2]})

    grid = expand_grid(_observed(), ["site", "transect"], "species", ["count"], units=units)

    empty = grid[(grid["site"] == "B") & (grid["transect"] == 2)]
    assert len(empty) == 2
    assert empty["count"].sum() == 0.0


def test_duplicate_rows_raise():
    obs = pd.concat([_observed(), _observed().iloc[[0]]], ignore_index=True)

    with pytest.raises(ValueError, match="duplicate"):
        expand_grid(obs, ["site", "transect"], "species", ["count"])


def test_category_outside_universe_raises():
    with pytest.raises(ValueError, match="outside the universe"):
        expand_grid(_observed(), ["site", "transect"], "species", ["count"], universe=["SPVI"])


def test_observed_unit_missing_from_units_raises():
    units = pd.DataFrame({"site": ["A"], "transect": [1]})

    with pytest.raises(ValueError, match="not in `units`"):
        expand_grid(_observed(), ["site", "transect"], "species", ["count"], units=units)


def test_missing_category_value_raises():
    obs = _observed()
    obs.loc[0, "species"] = None

    with pytest.raises(ValueError, match="missing values"):
        expand_grid(obs, ["site", "transect"], "species", ["count"])
