# tests/test_cover.py
import pandas as pd
import pytest

from reef_survey.aggregate.cover import mark_available, percent_cover

KEYS = ["site", "transect", "meter"]


def _points(rows):
    return pd.DataFrame(rows, columns=KEYS + ["benthic_class"])


def test_percent_cover_sums_to_100_per_unit():
    points = _points([
        ("A", 1, 1, "Hard coral"),
        ("A", 1, 1, "Hard coral"),
        ("A", 1, 1, "Macroalgae"),
        ("A", 1, 2, "Sponge"),
    ])

    cover = percent_cover(points, KEYS, "benthic_class")

    totals = cover.groupby(KEYS)["percent"].sum()
    assert totals.tolist() == pytest.approx([100.0, 100.0])
    coral = cover[(cover["meter"] == 1) & (cover["benthic_class"] == "Hard coral")]
    assert coral["percent"].iloc[0] == pytest.approx(200 / 3)
    assert coral["total_points"].iloc[0] == 3


def test_category_absent_from_unit_is_zero():
    points = _points([
        ("A", 1, 1, "Hard coral"),
        ("A", 1, 2, "Macroalgae"),
    ])

    cover = percent_cover(points, KEYS, "benthic_class")

    row = cover[(cover["meter"] == 2) & (cover["benthic_class"] == "Hard coral")]
    assert row["points"].iloc[0] == 0
    assert row["percent"].iloc[0] == 0.0


def test_unavailable_substrate_is_removed_from_denominator():
    points = _points([
        ("A", 1, 1, "Hard coral"),
        ("A", 1, 1, "Sand"),
        ("A", 1, 1, "Sand"),
        ("A", 1, 1, "Macroalgae"),
        ("A", 1, 2, "Sand"),
    ])
    flagged = mark_available(points, "benthic_class", ["Sand", "Hole"])

    cover = percent_cover(flagged[flagged["available"]], KEYS, "benthic_class")

    assert "Sand" not in set(cover["benthic_class"])
    # a meter of nothing but sand has no defined cover
    assert set(cover["meter"]) == {1}
    coral = cover[cover["benthic_class"] == "Hard coral"]
    assert coral["percent"].iloc[0] == pytest.approx(50.0)


def test_points_without_class_raise():
    points = _points([("A", 1, 1, None)])

    with pytest.raises(ValueError):
        percent_cover(points, KEYS, "benthic_class")
