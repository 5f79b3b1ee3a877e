# tests/test_report.py
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from reef_survey.aggregate.compare import compare_sites
from reef_survey.report import Section, render_report
from reef_survey.report.figures import plot_composition, plot_site_means, plot_transect_spread
from reef_survey.report.tables import benchmark_table, format_mean_se, site_summary_table


def _site_table():
    return pd.DataFrame({
        "site": ["A", "A", "B", "B"],
        "benthic_class": ["Hard coral", "Macroalgae"] * 2,
        "mean": [45.0, 55.0, 10.0, 90.0],
        "se": [3.5355, 3.5355, np.nan, np.nan],
        "n": [2, 2, 1, 1],
    })


def _transect_table():
    return pd.DataFrame({
        "site": ["A", "A", "B", "B", "C", "C"],
        "transect": [1, 2, 1, 2, 1, 2],
        "benthic_class": ["Hard coral"] * 6,
        "mean": [10.0, 12.0, 30.0, 34.0, 20.0, 22.0],
        "se": [np.nan] * 6,
        "n": [5] * 6,
    })


def test_format_mean_se():
    assert format_mean_se(45.0, 3.5355) == "45.0 ± 3.5"
    assert format_mean_se(12.0, np.nan) == "12.0"
    assert format_mean_se(np.nan, 1.0) == ""


def test_site_summary_table_is_wide():
    table = site_summary_table(_site_table(), "benthic_class", label="category")

    assert table.columns.tolist() == ["category", "A", "B"]
    assert table.set_index("category").loc["Hard coral", "A"] == "45.0 ± 3.5"
    assert table.set_index("category").loc["Hard coral", "B"] == "10.0"


def test_benchmark_table():
    table = benchmark_table(_site_table(), "benthic_class", {"Hard coral": 16.0})

    assert table["site"].tolist() == ["A", "B"]
    assert table["difference"].tolist() == [29.0, -6.0]
    assert table["relative"].tolist() == ["at or above", "below"]


def test_compare_sites():
    out = compare_sites(_transect_table(), "benthic_class")

    assert out["n_sites"].iloc[0] == 3
    assert 0.0 < out["p_value"].iloc[0] < 1.0


def test_compare_sites_single_site_is_nan():
    out = compare_sites(_transect_table().query("site == 'A'"), "benthic_class")

    assert np.isnan(out["p_value"].iloc[0])


def test_figures_are_written(tmp_path):
    means = plot_site_means(_site_table(), "benthic_class", tmp_path / "means.png", "Cover", "Cover (%)",
                            benchmarks={"Hard coral": 16.0}, figsize=(4, 3), dpi=50)
    comp = plot_composition(_site_table(), "benthic_class", tmp_path / "comp.png", "Composition",
                            figsize=(4, 3), dpi=50)
    spread = plot_transect_spread(_transect_table(), "benthic_class", "Hard coral", tmp_path / "spread.png",
                                  "Cover (%)", benchmark=16.0, dpi=50)

    for path in (means, comp, spread):
        assert path.exists()
        assert path.stat().st_size > 0


def test_render_report(tmp_path):
    fig = tmp_path / "figures" / "x.png"
    fig.parent.mkdir()
    fig.write_bytes(b"png")
    section = Section("Benthic <cover>", text="Notes", tables=[("Summary", _site_table())],
                      figures=[("Cover figure", fig)])

    out = render_report("Reef Survey Report", [section], tmp_path / "report.html",
                        generated=datetime(2026, 3, 1, 12, 0))

    page = out.read_text(encoding="utf-8")
    assert "<title>Reef Survey Report</title>" in page
    assert "Generated 2026-03-01 12:00" in page
    assert "Benthic &lt;cover&gt;" in page
    assert 'src="figures/x.png"' in page
    assert 'class="dataframe report-table"' in page
    assert "[sections]" not in page
