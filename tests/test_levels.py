# tests/test_levels.py
import numpy as np
import pandas as pd
import pytest

from reef_survey.aggregate.levels import level_keys, roll_up, summarize
from reef_survey.config import get_aggregation_settings

HIERARCHY = ["site", "transect", "meter"]


def _two_transects():
    # transect 1: meters 40, 60 -> 50; transect 2: meters 50, 30 -> 40
    return pd.DataFrame({
        "site": ["S"] * 4,
        "transect": [1, 1, 2, 2],
        "meter": [1, 2, 1, 2],
        "benthic_class": ["Hard coral"] * 4,
        "percent": [40.0, 60.0, 50.0, 30.0],
    })


def test_level_keys():
    assert level_keys(HIERARCHY, "site") == ["site"]
    assert level_keys(HIERARCHY, "meter") == HIERARCHY


def test_site_mean_is_mean_of_transect_means():
    levels = roll_up(_two_transects(), HIERARCHY, "benthic_class", "percent")

    transect = levels["transect"].set_index("transect")
    assert transect.loc[1, "mean"] == pytest.approx(50.0)
    assert transect.loc[2, "mean"] == pytest.approx(40.0)
    site = levels["site"].iloc[0]
    assert site["mean"] == pytest.approx(45.0)
    assert site["n"] == 2


def test_site_se_sample_std():
    levels = roll_up(_two_transects(), HIERARCHY, "benthic_class", "percent", ddof=1)

    assert levels["site"]["se"].iloc[0] == pytest.approx(5.0)
    assert levels["transect"].set_index("transect").loc[1, "se"] == pytest.approx(np.sqrt(200) / np.sqrt(2))


def test_site_se_population_std():
    levels = roll_up(_two_transects(), HIERARCHY, "benthic_class", "percent", ddof=0)

    assert levels["site"]["se"].iloc[0] == pytest.approx(5.0 / np.sqrt(2))



def test_shipped_ddof_and_population_override(analysis_cfg):
    shipped = get_aggregation_settings(analysis_cfg)["se_ddof"]
    population = get_aggregation_settings({"aggregation": {"se_ddof": 0}})["se_ddof"]

    sample_se = roll_up(_two_transects(), HIERARCHY, "benthic_class", "percent", ddof=shipped)["site"]["se"]
    population_se = roll_up(_two_transects(), HIERARCHY, "benthic_class", "percent", ddof=population)["site"]["se"]

    assert sample_se.iloc[0] == pytest.approx(5.0)
    assert population_se.iloc[0] == pytest.approx(3.5355, abs=1e-4)

def test_single_unit_has_no_se():
    base = _two_transects().iloc[:1]

    levels = roll_up(base, HIERARCHY, "benthic_class", "percent")

    assert levels["site"]["n"].iloc[0] == 1
    assert np.isnan(levels["site"]["se"].iloc[0])


def test_finest_level_carries_sample_count():
    base = _two_transects().assign(total_points=[10, 8, 9, 10])

    levels = roll_up(base, HIERARCHY, "benthic_class", "percent", n_col="total_points")

    assert levels["meter"]["n"].tolist() == [10, 8, 9, 10]
    assert levels["meter"]["se"].isna().all()


def test_roll_up_is_deterministic():
    base = _two_transects()
    first = roll_up(base, HIERARCHY, "benthic_class", "percent")
    second = roll_up(base.sample(frac=1.0, random_state=3), HIERARCHY, "benthic_class", "percent")

    for level in HIERARCHY:
        pd.testing.assert_frame_equal(first[level], second[level])


def test_duplicate_units_raise():
    base = pd.concat([_two_transects(), _two_transects().iloc[[0]]], ignore_index=True)

    with pytest.raises(ValueError, match="duplicate"):
        roll_up(base, HIERARCHY, "benthic_class", "percent")


def test_summarize_groups_by_category():
    df = pd.DataFrame({
        "site": ["A", "A", "A", "A"],
        "group": ["x", "x", "y", "y"],
        "mean": [1.0, 3.0, 2.0, 2.0],
    })

    out = summarize(df, ["site"], "group")

    assert out["mean"].tolist() == [2.0, 2.0]
    assert out["se"].tolist() == pytest.approx([1.0, 0.0])
    assert out.columns.tolist() == ["site", "group", "mean", "se", "n"]
