from pathlib import Path


def metadata_path(root: Path, table: str) -> Path:
    return root / "config" / "metadata" / f"{table}.csv"


def processed_dir(root: Path) -> Path:
    return root / "data" / "processed"


def processed_artifact_path(root: Path, dataset: str, metric: str, level: str) -> Path:
    name = f"{dataset}_{metric}_{level}.parquet"
    return processed_dir(root) / name


def tables_dir(root: Path) -> Path:
    return root / "results" / "tables"


def figures_dir(root: Path) -> Path:
    return root / "results" / "figures"


def logs_dir(root: Path) -> Path:
    return root / "results" / "logs"


def report_path(root: Path) -> Path:
    return root / "results" / "report.html"
