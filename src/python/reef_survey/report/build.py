"""
Report builder.

Turns the aggregate tables into CSV summaries, figures and the HTML
report. Stateless: reads only the results passed in and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from reef_survey.aggregate.compare import compare_sites
from reef_survey.aggregate.density import SIZE_LABELS
from reef_survey.config import get_benchmark_sources, get_benchmarks, get_report_settings, get_unit_settings
from reef_survey.paths import figures_dir, report_path, tables_dir
from reef_survey.report.figures import plot_composition, plot_site_means, plot_transect_spread
from reef_survey.report.html import Section, render_report
from reef_survey.report.tables import benchmark_table, comparison_table, site_summary_table


@dataclass(frozen=True)
class Product:
    dataset: str
    metric: str
    category_col: str
    title: str
    ylabel: str
    benchmark_key: str | None = None
    composition: bool = False
    order: tuple[str, ...] | None = None


def report_plan(units: dict[str, float]) -> list[Product]:
    fish_area = f"{units['fish_per_area_m2']:g} m²"
    invert_area = f"{units['invert_per_area_m2']:g} m²"
    return [
        Product("benthic", "benthic_class", "benthic_class", "Benthic cover by class", "Cover (%)",
                "benthic_class", composition=True),
        Product("benthic", "algal_type", "algal_type", "Algal cover by type", "Cover (%)",
                "algal_type", composition=True),
        Product("benthic", "coral_species", "code", "Hard coral cover by species", "Cover (%)"),
        Product("benthic", "coral_condition", "health_status", "Coral condition",
                "Share of coral points (%)", composition=True),
        Product("fish", "group_biomass", "functional_group", "Fish biomass by functional group",
                f"Biomass (g / {fish_area})", "fish_group_biomass"),
        Product("fish", "group_density", "functional_group", "Fish density by functional group",
                f"Fish / {fish_area}"),
        Product("fish", "fishery_biomass", "fishery", "Commercial and non-commercial fish biomass",
                f"Biomass (g / {fish_area})"),
        Product("fish", "size_density", "size_class", "Fish density by size class (cm)",
                f"Fish / {fish_area}", order=tuple(SIZE_LABELS)),
        Product("macroinvertebrates", "group_density", "invert_group", "Macroinvertebrate density by group",
                f"Individuals / {invert_area}", "invert_group_density"),
        Product("rugosity", "relief", "measure", "Maximum vertical relief", "Relief (cm)", "rugosity"),
    ]


def _product_section(product: Product, levels: dict[str, pd.DataFrame], analysis_cfg: dict[str, Any],
                     root: Path, settings: dict[str, Any]) -> tuple[Section, dict[str, Path]]:
    site_df = levels["site"]
    name = f"{product.dataset}_{product.metric}"
    benchmarks = get_benchmarks(analysis_cfg, product.benchmark_key) if product.benchmark_key else {}
    categories = list(product.order) if product.order else None
    size, dpi, decimals = settings["figure_size"], settings["dpi"], settings["decimals"]
    outputs: dict[str, Path] = {}

    section = Section(product.title)
    if site_df.empty:
        section.text = "No observations."
        return section, outputs

    fig = plot_site_means(site_df, product.category_col, figures_dir(root) / f"{name}_site_means.png",
                          product.title, product.ylabel, benchmarks, categories, size, dpi)
    section.figures.append((f"{product.title}: site mean ± SE", fig))
    outputs[f"{name}_site_means"] = fig

    if product.composition:
        comp = plot_composition(site_df, product.category_col,
                                figures_dir(root) / f"{name}_composition.png",
                                f"{product.title}: composition", size, dpi)
        section.figures.append((f"{product.title}: composition", comp))
        outputs[f"{name}_composition"] = comp

    transect_df = levels.get("transect")
    if transect_df is not None:
        present = set(transect_df[product.category_col])
        for category, value in benchmarks.items():
            if category not in present:
                continue
            slug = category.lower().replace(" ", "_")
            spread = plot_transect_spread(transect_df, product.category_col, category,
                                          figures_dir(root) / f"{name}_{slug}_transects.png",
                                          product.ylabel, value, dpi=dpi)
            section.figures.append((f"{category}: transect means", spread))
            outputs[f"{name}_{slug}_transects"] = spread

    summary = site_summary_table(site_df, product.category_col, decimals, label="category")
    summary_path = tables_dir(root) / f"{name}_site_summary.csv"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary.to_csv(summary_path, index=False)
    outputs[f"{name}_site_summary"] = summary_path
    section.tables.append(("Site mean ± SE", summary))

    bench = benchmark_table(site_df, product.category_col, benchmarks, decimals)
    if not bench.empty:
        bench_path = tables_dir(root) / f"{name}_benchmarks.csv"
        bench.to_csv(bench_path, index=False)
        outputs[f"{name}_benchmarks"] = bench_path
        section.tables.append(("Comparison with regional benchmarks", bench))

    if transect_df is not None and transect_df["site"].nunique() > 1:
        comparison = comparison_table(compare_sites(transect_df, product.category_col), product.category_col)
        comparison_path = tables_dir(root) / f"{name}_site_comparison.csv"
        comparison.to_csv(comparison_path, index=False)
        outputs[f"{name}_site_comparison"] = comparison_path
        section.tables.append(("Kruskal-Wallis test across sites (transect means)", comparison))

    return section, outputs


def build_report(root: Path, results: dict, analysis_cfg: dict[str, Any],
                 effort: pd.DataFrame | None = None) -> dict[str, Path]:
    """
    Render every product in the report plan and write the HTML report.

    Products missing from `results` are skipped. Returns {artifact name: path},
    including "report".
    """
    settings = get_report_settings(analysis_cfg)
    units = get_unit_settings(analysis_cfg)
    sections: list[Section] = []
    outputs: dict[str, Path] = {}

    for product in report_plan(units):
        levels = results.get(product.dataset, {}).get(product.metric)
        if not levels or "site" not in levels:
            continue
        section, produced = _product_section(product, levels, analysis_cfg, root, settings)
        sections.append(section)
        outputs.update(produced)

    if effort is not None and not effort.empty:
        sections.append(Section("Sampling effort", tables=[("Transects, units and records per site", effort)]))

    refs = pd.DataFrame(get_benchmark_sources(analysis_cfg))
    if not refs.empty:
        sections.append(Section(
            "Regional benchmarks",
            text="Published regional reference values used as benchmark lines.",
            tables=[("Benchmark values", refs)],
        ))

    outputs["report"] = render_report(settings["title"], sections, report_path(root))
    return outputs
