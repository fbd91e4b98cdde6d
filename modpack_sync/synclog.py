"""Run log: timestamped lines in a log file, echoed to the console."""

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

LEVEL_TAGS = {
    "info": "[INFO]",
    "warn": "[WARN]",
    "error": "[ERR!]",
}

LEVEL_STYLES = {
    "info": "dim",
    "warn": "yellow",
    "error": "red",
}


class SyncLog:
    """
    Log sink for a sync run.

    The log file is truncated when the sink is created, so it only ever
    holds the latest run. Instances are callable as (level, message).
    """

    def __init__(self, log_file: Path, console: Console | None = None):
        self.log_file = Path(log_file)
        self.console = console
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_file.write_text("", encoding="utf-8")

    def __call__(self, level: str, message: str) -> None:
        tag = LEVEL_TAGS.get(level, LEVEL_TAGS["info"])
        now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"[{now}] {tag} {message}\n")

        if self.console is not None:
            style = LEVEL_STYLES.get(level, LEVEL_STYLES["info"])
            self.console.print(f"[{style}]{escape(tag)}[/{style}] {escape(message)}")

    def info(self, message: str) -> None:
        self("info", message)

    def warn(self, message: str) -> None:
        self("warn", message)

    def error(self, message: str) -> None:
        self("error", message)
