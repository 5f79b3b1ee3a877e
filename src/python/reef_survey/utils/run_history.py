"""
Run history tracking for stage scripts.

Appends concise summaries to results/logs/RUN_HISTORY.md after each
successful run, so what a run produced is recorded next to its log.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from reef_survey.paths import logs_dir


def format_entry(stage: str, config: dict[str, Any], results: dict[str, Any],
                 log_path: str = "", notes: str = "", when: datetime | None = None) -> str:
    """
    Render one markdown history entry.

    >>> print(format_entry("Stage 01", {"se_ddof": 1}, {"sites": 3},
    ...                    when=datetime(2026, 1, 2, 3, 4)).splitlines()[0])
    ## 2026-01-02 03:04 | Stage 01
    """
    timestamp = (when or datetime.now()).strftime("%Y-%m-%d %H:%M")

    def bullets(d: dict[str, Any]) -> str:
        lines = [f"  - {k}: {v}" for k, v in d.items()]
        return "\n".join(lines) if lines else "  - (none)"

    return (
        f"## {timestamp} | {stage}\n\n"
        f"- **Config**:\n{bullets(config)}\n"
        f"- **Results**:\n{bullets(results)}\n"
        f"- **Log**: {log_path or '(none)'}\n"
        f"- **Notes**: {notes}\n\n---\n\n"
    )


def append_to_run_history(
    root: Path,
    stage: str,
    config: dict[str, Any],
    results: dict[str, Any],
    log_path: str = "",
    notes: str = "",
) -> Path:
    """
    Append a summary entry to RUN_HISTORY.md and return its path.

    Example:
        append_to_run_history(
            root=root,
            stage="Stage 01: Survey Metrics",
            config={"unmapped_codes": "warn", "se_ddof": 1},
            results={"sites": 4, "transects": 24},
            log_path="results/logs/stage01_survey_metrics_20260110_101500.txt",
        )
    """
    history_path = logs_dir(root) / "RUN_HISTORY.md"
    history_path.parent.mkdir(parents=True, exist_ok=True)
    with open(history_path, "a", encoding="utf-8") as f:
        f.write(format_entry(stage, config, results, log_path, notes))

    print(f"  Appended to run history: {history_path.relative_to(root)}")
    return history_path
