from __future__ import annotations

"""
Domain Constants.

Centralized access to application-wide constants: versioning, snapshot
framing markers, column floors and pipeline sizing factors.
"""

APP_NAME = "diskusage"
APP_VERSION = "0.3.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# Distinguished key of the scan root inside every aggregate mapping
ROOT_KEY = "."

# Marker used for standard input / standard output in snapshot I/O
STDIO_MARKER = "-"

# Gzip framing
GZIP_MAGIC = b"\x1f\x8b"
GZIP_SUFFIX = ".gz"

# Work queue capacity per worker (producer backpressure)
QUEUE_SLOTS_PER_WORKER = 8
WORKERS_PER_CPU = 2

# Display defaults
DEFAULT_LEVELS = 2
MIN_SIZE_WIDTH = 4
MIN_FILES_WIDTH = 3
OWNER_COLUMN_WIDTH = 15
SUMMARY_NAME_WIDTH = 20

SIZE_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")
