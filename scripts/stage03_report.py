"""
Stage 03: Report

Reads the aggregate tables written by Stage 01 and renders:
- site summary, benchmark and site comparison tables (results/tables/)
- bar, composition and transect spread figures (results/figures/)
- the HTML report (results/report.html)
"""

import sys
from pathlib import Path

import pandas as pd

root = Path(__file__).parent.parent
sys.path.append(str(root / "src" / "python"))

from reef_survey.config import load_analysis_config
from reef_survey.data import load_results
from reef_survey.paths import tables_dir
from reef_survey.report import build_report
from reef_survey.utils.logging import setup_stage_logging
from reef_survey.utils.run_history import append_to_run_history


def main():
    with setup_stage_logging(root, "stage03_report") as logger:
        print("=" * 60)
        print("STAGE 03: REPORT")
        print("=" * 60)
        print()

        cfg = load_analysis_config(root)

        print("Step 1: Loading aggregate tables...")
        results = load_results(root)
        n = sum(len(levels) for metrics in results.values() for levels in metrics.values())
        print(f"✓ Loaded {n} tables")
        effort_path = tables_dir(root) / "sampling_effort.csv"
        effort = pd.read_csv(effort_path) if effort_path.exists() else None
        if effort is None:
            print("  Warning: sampling_effort.csv not found; run stage02 to include effort in the report")
        print()

        print("Step 2: Rendering figures, tables and report...")
        outputs = build_report(root, results, cfg, effort)
        n_figs = sum(1 for p in outputs.values() if p.suffix == ".png")
        n_tables = sum(1 for p in outputs.values() if p.suffix == ".csv")
        print(f"✓ {n_figs} figures, {n_tables} tables")
        print(f"✓ Report: {outputs['report'].relative_to(root)}")
        print()

        append_to_run_history(
            root=root,
            stage="Stage 03: Report",
            config={"tables_in": n},
            results={"figures": n_figs, "tables": n_tables, "report": str(outputs["report"].relative_to(root))},
            log_path=str(logger.log_path.relative_to(root)),
        )

        print("=" * 60)
        print("✓ Stage 03 complete")
        print("=" * 60)


if __name__ == "__main__":
    main()
