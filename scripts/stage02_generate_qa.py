"""
Stage 02: Generate QA artifacts

Reads the survey workbook and produces:
- results/tables/survey_schema.csv
- results/tables/sampling_effort.csv
- results/figures/sampling_effort.png
- results/logs/qa_summary.json
"""

import sys
from pathlib import Path

root = Path(__file__).parent.parent
sys.path.append(str(root / "src" / "python"))

from reef_survey.classify import load_code_tables
from reef_survey.config import load_analysis_config, get_classification_settings, get_report_settings
from reef_survey.paths import figures_dir, logs_dir, tables_dir
from reef_survey.pipeline import load_survey
from reef_survey.qa.effort import (
    available_fraction,
    compute_schema,
    plot_effort,
    sampling_effort,
    unmapped_report,
    write_summary_json,
)
from reef_survey.utils.run_history import append_to_run_history


def main() -> None:
    analysis = load_analysis_config(root)
    report = get_report_settings(analysis)
    classification = get_classification_settings(analysis)
    tables = load_code_tables(root)
    for d in (tables_dir(root), figures_dir(root), logs_dir(root)):
        d.mkdir(parents=True, exist_ok=True)

    survey = load_survey(root, analysis)

    schema_df = compute_schema(survey)
    schema_df.to_csv(tables_dir(root) / "survey_schema.csv", index=False)

    effort = sampling_effort(survey)
    effort.to_csv(tables_dir(root) / "sampling_effort.csv", index=False)
    plot_effort(effort, figures_dir(root) / "sampling_effort.png",
                fig_size=report["figure_size"], dpi=report["dpi"])

    avail = available_fraction(survey["benthic"], tables, classification)
    unmapped = unmapped_report(survey, tables)
    rows = {name: int(len(df)) for name, df in survey.items()}
    write_summary_json(logs_dir(root) / "qa_summary.json", rows, effort, {
        "available_fraction": avail.to_dict(orient="records"),
        "unmapped_codes": unmapped,
    })

    append_to_run_history(
        root=root,
        stage="Stage 02: QA Artifacts",
        config={"datasets": len(survey)},
        results={
            "schema_columns": len(schema_df),
            "sites": int(effort["site"].nunique()) if not effort.empty else 0,
            "unmapped_tables": ", ".join(unmapped) or "none",
        },
    )


if __name__ == "__main__":
    main()
