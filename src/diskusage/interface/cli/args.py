from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict

from diskusage.domain.constants import APP_NAME, APP_VERSION

# Sentinel for '--log-file' given without a path
DEFAULT_LOG_FILE = ""

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the diskusage CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Summarize disk usage per directory, owner and group.",
    )

    # --- Input Selection ---
    p.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to scan (default: current directory).",
    )
    p.add_argument(
        "--root",
        dest="root_path",
        default=None,
        help="Directory to scan; the positional argument takes precedence.",
    )
    p.add_argument(
        "--load",
        dest="load_path",
        metavar="FILE",
        default=None,
        help="Read a snapshot (plain or gzip, '-' for stdin) instead of scanning.",
    )
    p.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of scan workers (default: twice the CPU count).",
    )

    # --- Report Layout ---
    p.add_argument(
        "--levels",
        type=int,
        default=None,
        help="Tree depth below the root (0 shows the root only).",
    )
    p.add_argument("--user", action="store_true", help="Show the owner of each directory.")
    p.add_argument("--group", action="store_true", help="Show the group of each directory.")
    p.add_argument("--files", action="store_true", help="Show cumulative file counts.")
    p.add_argument(
        "--bytes",
        action="store_true",
        help="Print sizes as exact byte counts.",
    )
    p.add_argument(
        "--size-width",
        dest="size_width",
        type=int,
        default=None,
        help="Fixed width of the size column (0 = fit).",
    )
    p.add_argument(
        "--files-width",
        dest="files_width",
        type=int,
        default=None,
        help="Fixed width of the files column (0 = fit).",
    )
    p.add_argument(
        "--top",
        dest="top_n",
        type=int,
        default=None,
        help="Rows per user/group summary (0 = all).",
    )

    # --- Snapshot Output ---
    p.add_argument(
        "--json",
        dest="json_output",
        metavar="FILE",
        default=None,
        help="Write a JSON snapshot instead of the report ('-' for stdout).",
    )
    p.add_argument(
        "--gzip",
        action="store_true",
        help="Compress the snapshot with gzip ('.gz' is appended if missing).",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Store the effective layout options as the new defaults.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const=DEFAULT_LOG_FILE,
        default=None,
        metavar="PATH",
        help="Also write logs to a rotating file (default location if no PATH).",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Options that were not given map to None and are skipped when merging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["root_path"] = args.root if args.root is not None else args.root_path
    overrides["load_path"] = args.load_path
    overrides["concurrency"] = args.concurrency

    overrides["levels"] = args.levels
    overrides["size_width"] = args.size_width
    overrides["files_width"] = args.files_width
    overrides["top_n"] = args.top_n

    overrides["json_output"] = args.json_output

    # Switches only ever turn features on
    if args.user:
        overrides["show_user"] = True
    if args.group:
        overrides["show_group"] = True
    if args.files:
        overrides["show_files"] = True
    if args.bytes:
        overrides["raw_bytes"] = True
    if args.gzip:
        overrides["gzip_output"] = True

    return overrides
