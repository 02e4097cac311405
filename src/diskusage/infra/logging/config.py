from __future__ import annotations

"""
Logging settings for the scan CLI.

Standard output carries the report or the snapshot, so console records go to
stderr with a short prefix. The optional log file also records the emitting
thread, which tells scan workers apart.
"""

import logging
from dataclasses import dataclass
from typing import Optional

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Attributes:
        level: Level name; unknown names fall back to INFO.
        console: Write records to stderr.
        log_file: Rotating log file path, or None.
        max_bytes: Rollover size of the log file.
        backup_count: Rotated files to keep.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "diskusage: %(levelname)s: %(message)s"
    file_fmt: str = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%dT%H:%M:%S"

    def level_number(self) -> int:
        name = str(self.level or "").strip().upper()
        if name not in LEVEL_NAMES:
            return logging.INFO
        return logging.getLevelName(name)
