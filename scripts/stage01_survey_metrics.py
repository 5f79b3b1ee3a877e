"""
Stage 01: Survey Metrics

Loads every survey sheet, classifies codes and aggregates:
- Benthic: percent cover by class, algal type, coral species, coral condition
- Fish: density and biomass by species, functional group, fishery, size class
- Macroinvertebrates: density by species and group (urchins)
- Rugosity: maximum relief

Every sheet is loaded and every product validated before anything is
written; a failure leaves data/processed/ untouched.
"""

import sys
import warnings
from pathlib import Path

root = Path(__file__).parent.parent
sys.path.append(str(root / "src" / "python"))

from reef_survey.config import (
    load_analysis_config,
    get_workbook_path,
    get_classification_settings,
    get_aggregation_settings,
)
from reef_survey.data import save_results, save_summary_json
from reef_survey.errors import UnmappedCodeWarning
from reef_survey.paths import logs_dir
from reef_survey.pipeline import compute_metrics, load_survey
from reef_survey.utils.logging import setup_stage_logging
from reef_survey.utils.run_history import append_to_run_history


def generate_summary(survey: dict, results: dict) -> dict:
    """Row counts, sites and product sizes for the summary JSON."""
    sites = sorted({str(s) for df in survey.values() for s in df["site"].unique()})
    return {
        "rows": {name: int(len(df)) for name, df in survey.items()},
        "sites": sites,
        "products": {
            dataset: {metric: {level: int(len(t)) for level, t in levels.items()}
                      for metric, levels in metrics.items()}
            for dataset, metrics in results.items()
        },
    }


def main():
    with setup_stage_logging(root, "stage01_survey_metrics") as logger:
        print("=" * 60)
        print("STAGE 01: SURVEY METRICS")
        print("=" * 60)
        print()

        cfg = load_analysis_config(root)
        classification = get_classification_settings(cfg)
        agg = get_aggregation_settings(cfg)
        print("Configuration:")
        print(f"  workbook: {get_workbook_path(cfg, root)}")
        print(f"  unmapped_codes: {classification['unmapped_codes']}")
        print(f"  unavailable_classes: {', '.join(classification['unavailable_classes'])}")
        print(f"  se_ddof: {agg['se_ddof']}")
        print()

        print("Step 1: Loading survey sheets...")
        survey = load_survey(root, cfg)
        for name, df in survey.items():
            print(f"✓ {name}: {len(df):,} rows, {df['site'].nunique()} sites")
            dropped = df.attrs.get("dropped_rows", 0)
            if dropped:
                print(f"  ⚠ {dropped} row(s) without a full grouping key dropped")
        print()

        print("Step 2: Classifying and aggregating...")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", UnmappedCodeWarning)
            results = compute_metrics(root, cfg, survey)
        caught = [w for w in caught if issubclass(w.category, UnmappedCodeWarning)]
        for w in caught:
            print(f"⚠ {w.message}")
        for dataset, metrics in results.items():
            print(f"✓ {dataset}: {', '.join(metrics)}")
        print("✓ Cover totals and parent-class totals validated at every level")
        print()

        print("Step 3: Saving outputs...")
        manifest = save_results(root, results)
        n_tables = sum(len(levels) for metrics in manifest.values() for levels in metrics.values())
        print(f"  ✓ Saved {n_tables} aggregate tables to data/processed/")
        summary = generate_summary(survey, results)
        summary["unmapped_warnings"] = [str(w.message) for w in caught]
        save_summary_json(summary, logs_dir(root) / "survey_metrics_summary.json")
        print("  ✓ Saved summary: results/logs/survey_metrics_summary.json")
        print()

        append_to_run_history(
            root=root,
            stage="Stage 01: Survey Metrics",
            config={
                "unmapped_codes": classification["unmapped_codes"],
                "se_ddof": agg["se_ddof"],
                "cover_tolerance": agg["cover_tolerance"],
            },
            results={
                "sites": ", ".join(summary["sites"]),
                "benthic_points": summary["rows"]["benthic"],
                "fish_records": summary["rows"]["fish"],
                "tables": n_tables,
                "unmapped_warnings": len(caught),
            },
            log_path=str(logger.log_path.relative_to(root)),
        )

        print("=" * 60)
        print("✓ Stage 01 complete")
        print("=" * 60)


if __name__ == "__main__":
    main()
