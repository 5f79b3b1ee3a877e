"""
Logging utilities for stage scripts.

Stage output goes to stdout; this module tees it into a timestamped log
under results/logs/ and archives earlier logs of the same stage.
"""

import shutil
import sys
from datetime import datetime
from pathlib import Path

from reef_survey.paths import logs_dir


class StageLogger:
    """
    Captures stdout to both terminal and a log file.

    Usable as a context manager; stdout is restored on exit even when the
    stage fails, and the failure is written to the log before it propagates.

    Usage:
        with setup_stage_logging(root, "stage01_survey_metrics") as logger:
            print("Your output here")
    """

    def __init__(self, log_path: Path):
        self.terminal = sys.stdout
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_file = open(log_path, "w", encoding="utf-8")

    def write(self, message: str):
        """Write message to both terminal and log file."""
        self.terminal.write(message)
        self.log_file.write(message)

    def flush(self):
        """Flush both terminal and log file buffers."""
        self.terminal.flush()
        self.log_file.flush()

    def close(self):
        """Restore stdout and close the log file."""
        if sys.stdout is self:
            sys.stdout = self.terminal
        if not self.log_file.closed:
            self.log_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is not None:
            print(f"✗ Stage failed: {exc_type.__name__}: {exc}")
        print(f"Finished: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        self.close()
        return False


def setup_stage_logging(root: Path, stage_name: str) -> StageLogger:
    """
    Set up timestamped logging with archiving of previous logs.

    Creates a timestamped log file in results/logs/ and moves any previous
    logs for the same stage to results/logs/archive/.

    Args:
        root: Project root directory
        stage_name: Name of the stage (e.g., "stage01_survey_metrics")

    Returns:
        StageLogger instance installed as sys.stdout
    """
    log_dir = logs_dir(root)
    archive_dir = log_dir / "archive"
    log_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = log_dir / f"{stage_name}_{timestamp}.txt"

    for existing_log in sorted(log_dir.glob(f"{stage_name}_*.txt")):
        if existing_log != log_path:
            shutil.move(str(existing_log), str(archive_dir / existing_log.name))
            print(f"Archived previous log: {existing_log.name} → archive/")

    logger = StageLogger(log_path)
    sys.stdout = logger

    print(f"Log file: {log_path.relative_to(root)}")
    print(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print()

    return logger
