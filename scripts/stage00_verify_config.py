"""
Stage 00: Verify Configuration

Reads config and prints resolved workbook path, per-sheet loader
settings, classification policy, units and benchmarks using
pretty-printed JSON. Validates settings but does not read the workbook;
intended for quick setup checks.
"""

import sys
import json
from pathlib import Path

root = Path(__file__).parent.parent
sys.path.append(str(root / "src" / "python"))

from reef_survey.classify import load_code_tables
from reef_survey.config import (
    SOURCES,
    load_analysis_config,
    get_workbook_path,
    get_sites_include,
    get_source_settings,
    validate_source_settings,
    get_classification_settings,
    get_unit_settings,
    get_aggregation_settings,
    get_benchmark_sources,
)


def main():
    """Print configuration values and code table sizes as JSON."""
    analysis = load_analysis_config(root)
    workbook = get_workbook_path(analysis, root)
    sources = {s: validate_source_settings(get_source_settings(analysis, s), s) for s in SOURCES}
    tables = load_code_tables(root)

    print(json.dumps({
        "workbook": str(workbook),
        "workbook_exists": workbook.exists(),
        "sites": get_sites_include(analysis) or "all",
        "sources": sources,
        "classification": get_classification_settings(analysis),
        "units": get_unit_settings(analysis),
        "aggregation": get_aggregation_settings(analysis),
    }, indent=2))

    print(json.dumps({
        "code_tables": {
            name: len(tables.table(name))
            for name in ["benthic_class", "algal_type", "health_status", "fish_functional_group", "invert_group"]
        },
        "benchmarks": get_benchmark_sources(analysis),
    }, indent=2))


if __name__ == "__main__":
    main()
