"""
Structured logging utility.
Single responsibility: emit dotted-name events with context to the console
and an optional JSON-lines file.
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union


LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40, "CRITICAL": 50}


class StructuredLogger:
    """
    Event logger for a comparison run.

    Events are dotted names such as ``reader.table_loaded`` with keyword
    context. The console shows events at or above ``level``; the log file,
    when set, receives every event as one JSON object per line.
    """

    def __init__(self, name: str = "tabdiff",
                 log_file: Optional[Path] = None,
                 level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name stored in every entry
            log_file: JSON-lines file to append to
            level: Minimum console level
        """
        self.name = name
        self.log_file = Path(log_file) if log_file else None
        self.level = level.upper()

    def configure(self, level: Optional[str] = None,
                  log_file: Optional[Union[str, Path]] = None):
        """Change the console level and/or the log file of a live logger."""
        if level:
            self.level = level.upper()
        if log_file:
            self.log_file = Path(log_file)

    def is_enabled(self, level: str) -> bool:
        """Whether ``level`` reaches the console."""
        return LEVELS[level] >= LEVELS.get(self.level, LEVELS["INFO"])

    def _entry(self, level: str, event: str, context: Dict[str, Any]) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": event,
        }
        if context:
            entry["context"] = context
        return entry

    def _to_console(self, entry: Dict[str, Any]):
        clock = entry["timestamp"].split("T")[1][:8]
        lines = [f"[{clock}] {entry['level']:5} | {entry['message']}"]
        lines += [f"  {key}={value}" for key, value in entry.get("context", {}).items()]
        print("\n".join(lines), file=sys.stderr)

    def _to_file(self, entry: Dict[str, Any]):
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    def log(self, level: str, event: str, **context):
        """
        Emit one event.

        Args:
            level: One of ``LEVELS``
            event: Dotted event name
            **context: Values shown under the event and stored in the file
        """
        entry = self._entry(level, event, context)
        if self.is_enabled(level):
            self._to_console(entry)
        if self.log_file:
            self._to_file(entry)

    def debug(self, event: str, **context):
        self.log("DEBUG", event, **context)

    def info(self, event: str, **context):
        self.log("INFO", event, **context)

    def warning(self, event: str, **context):
        self.log("WARN", event, **context)

    def error(self, event: str, **context):
        self.log("ERROR", event, **context)


# Shared by every module of the package
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "tabdiff") -> StructuredLogger:
    """Return the process-wide logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger
