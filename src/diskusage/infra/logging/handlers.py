from __future__ import annotations

"""
Handler factories for the logging listener.

Every handler created here is tagged, so reconfiguration and shutdown only
remove handlers this package installed.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from diskusage.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_diskusage_handler"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _console_handler(cfg: LoggingConfig, level: int) -> logging.Handler:
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(cfg.console_fmt))
    return _tag_handler(sh)


def _file_handler(cfg: LoggingConfig, level: int) -> Optional[logging.Handler]:
    """
    Rotating handler for cfg.log_file.

    An unwritable location only costs the file output: a warning goes to
    stderr and None is returned, the scan itself is unaffected.
    """
    path = os.path.abspath(str(cfg.log_file))
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        fh = RotatingFileHandler(
            path,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"diskusage: WARNING: log file '{path}' unavailable: {e}\n")
        return None

    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
    return _tag_handler(fh)
