from pathlib import Path
from typing import Any

import yaml

SOURCES = ("benthic", "fish", "macroinvertebrates", "rugosity")
UNMAPPED_POLICIES = ("warn", "error", "exclude")


def read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r") as f:
        return yaml.safe_load(f) or {}


def load_analysis_config(root: Path) -> dict[str, Any]:
    """
    Read and return the analysis YAML configuration.

    Example
    -------
    >>> from pathlib import Path
    >>> cfg = load_analysis_config(Path('.'))
    """
    return read_yaml(root / "config" / "analysis.yml")


def load_codes_config(root: Path) -> dict[str, Any]:
    """
    Read and return the code -> class lookup tables.
    """
    return read_yaml(root / "config" / "codes.yml")


def get_workbook_path(analysis_cfg: dict[str, Any], root: Path) -> Path:
    """
    Resolve the survey workbook path relative to project root.
    """
    src = analysis_cfg.get("survey", {}).get("workbook")
    base = Path(src) if src else Path("data/raw/reef_survey.xlsx")
    return (root / base).resolve()


def get_sites_include(analysis_cfg: dict[str, Any]) -> list:
    """
    Return list of site names to include; empty means all sites.
    """
    return list(analysis_cfg.get("survey", {}).get("sites", {}).get("include", []) or [])


def get_drop_columns(analysis_cfg: dict[str, Any]) -> list[str]:
    return [str(c).lower() for c in analysis_cfg.get("drop_columns", ["date", "surveyor", "notes"])]


def get_source_settings(analysis_cfg: dict[str, Any], source: str) -> dict[str, Any]:
    """
    Return normalized loader settings for a given survey sheet.

    Keys returned:
    - sheet_name: str (defaults to the source name)
    - required_columns: list[str]
    - rename: dict[str, str] of normalized header -> canonical column
    - drop_columns: list[str]
    """
    s = analysis_cfg.get("sources", {}).get(source, {})
    return {
        "sheet_name": s.get("sheet_name", source),
        "required_columns": list(s.get("required_columns", [])),
        "rename": dict(s.get("rename", {}) or {}),
        "drop_columns": get_drop_columns(analysis_cfg),
    }


def validate_source_settings(settings: dict[str, Any], source: str) -> dict[str, Any]:
    """
    Validate loader settings and return the same dict.

    Rules:
    - sheet_name must be a non-empty string.
    - required_columns must be a non-empty list that includes `site` and `transect`.
    - rename must map strings to strings.
    Raises ValueError with clear messages including config path.
    """
    sheet = settings.get("sheet_name")
    if not isinstance(sheet, str) or not sheet.strip():
        raise ValueError(f"analysis.yml:sources.{source}.sheet_name: must be a non-empty string")
    req = settings.get("required_columns", [])
    if not isinstance(req, list) or not req:
        raise ValueError(f"analysis.yml:sources.{source}.required_columns: must be a non-empty list")
    for key in ("site", "transect"):
        if key not in req:
            raise ValueError(f"analysis.yml:sources.{source}.required_columns: must include '{key}'")
    rename = settings.get("rename", {})
    if not isinstance(rename, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in rename.items()):
        raise ValueError(f"analysis.yml:sources.{source}.rename: must map column names to column names")
    return settings


def get_classification_settings(analysis_cfg: dict[str, Any]) -> dict[str, Any]:
    """
    Return classification policy settings.

    `unmapped_codes` decides what happens to codes missing from a lookup table:
    - "warn": emit UnmappedCodeWarning and classify as "Unclassified"
    - "error": raise UnmappedCodeError
    - "exclude": drop the rows before aggregation
    """
    c = analysis_cfg.get("classification", {})
    policy = c.get("unmapped_codes", "warn")
    if policy not in UNMAPPED_POLICIES:
        raise ValueError(
            f"analysis.yml:classification.unmapped_codes: must be one of {', '.join(UNMAPPED_POLICIES)}"
        )
    return {
        "unmapped_codes": policy,
        "unavailable_classes": list(c.get("unavailable_classes", ["Sand", "Hole", "Seagrass", "Pavement"])),
        "algal_parent_classes": list(
            c.get("algal_parent_classes", ["Macroalgae", "Turf algae", "Crustose coralline algae"])
        ),
        "coral_class": c.get("coral_class", "Hard coral"),
        "healthy_status": c.get("healthy_status", "Healthy"),
    }


def get_unit_settings(analysis_cfg: dict[str, Any]) -> dict[str, float]:
    """
    Return belt areas and the areal unit densities are reported in.
    """
    u = analysis_cfg.get("units", {})
    settings = {
        "fish_belt_area_m2": float(u.get("fish_belt_area_m2", 60)),
        "fish_per_area_m2": float(u.get("fish_per_area_m2", 100)),
        "invert_belt_area_m2": float(u.get("invert_belt_area_m2", 10)),
        "invert_per_area_m2": float(u.get("invert_per_area_m2", 1)),
    }
    for k, v in settings.items():
        if v <= 0:
            raise ValueError(f"analysis.yml:units.{k}: must be positive")
    return settings


def get_aggregation_settings(analysis_cfg: dict[str, Any]) -> dict[str, Any]:
    ddof = analysis_cfg.get("aggregation", {}).get("se_ddof", 1)
    if ddof not in (0, 1):
        raise ValueError("analysis.yml:aggregation.se_ddof: must be 0 or 1")
    return {
        "se_ddof": int(ddof),
        "cover_tolerance": float(analysis_cfg.get("validation", {}).get("cover_tolerance", 1e-6)),
    }


def get_benchmarks(analysis_cfg: dict[str, Any], metric: str) -> dict[str, float]:
    """
    Return {category: value} regional benchmarks for a metric, e.g. "benthic_class".
    """
    entries = analysis_cfg.get("benchmarks", {}).get(metric, {}) or {}
    out = {}
    for category, entry in entries.items():
        value = entry.get("value") if isinstance(entry, dict) else entry
        if value is None:
            raise ValueError(f"analysis.yml:benchmarks.{metric}.{category}: missing value")
        out[category] = float(value)
    return out


def get_benchmark_sources(analysis_cfg: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Flatten benchmarks into rows for the report's reference table.
    """
    rows = []
    for metric, entries in (analysis_cfg.get("benchmarks", {}) or {}).items():
        for category, entry in (entries or {}).items():
            entry = entry if isinstance(entry, dict) else {"value": entry}
            rows.append({
                "metric": metric,
                "category": category,
                "value": entry.get("value"),
                "unit": entry.get("unit", ""),
                "source": entry.get("source", ""),
            })
    return rows


def get_report_settings(analysis_cfg: dict[str, Any]) -> dict[str, Any]:
    r = analysis_cfg.get("report", {})
    size = r.get("figure_size", [10, 6])
    return {
        "title": r.get("title", "Reef Survey Report"),
        "dpi": int(r.get("dpi", 200)),
        "figure_size": (float(size[0]), float(size[1])),
        "decimals": int(r.get("decimals", 1)),
    }
