from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, persistent storage, and CLI overrides),
pipeline execution, and result rendering.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from diskusage.core.pipeline.engine import (
    ERROR_CANCELLED,
    ERROR_INPUT,
    ERROR_ROOT,
    error_kind,
    run_pipeline,
)
from diskusage.core.pipeline.stages.validator import validate_config
from diskusage.domain.config import get_default_config, load_config, save_config
from diskusage.domain.pipeline_models import PipelineResult
from diskusage.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
    shutdown_logging,
)
from diskusage.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad root or input,
             130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (stderr, optional rotating file)
    log_file = None
    if args.log_file is not None:
        log_file = args.log_file or get_default_log_path()
    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file), force=True)

    try:
        return _run(args)
    finally:
        shutdown_logging()


def _run(args: Any) -> int:
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (Default vs Persistent state)
    if args.use_defaults:
        base_conf = get_default_config()
    else:
        base_conf = load_config()

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config:
        try:
            path = save_config(clean_conf)
        except OSError as e:
            logger.error(f"Could not save configuration: {e}")
            print(f"ERROR: could not save configuration: {e}", file=sys.stderr)
            return EXIT_FAILURE
        logger.info(f"Configuration saved to {path}")

    # 6. Pipeline execution phase
    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.critical(f"Pipeline failed: {e}", exc_info=True)
        print(f"ERROR: pipeline failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # 7. Output rendering phase
    return _emit(result)

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None means 'not given on the command line'.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "root_path", "load_path", "concurrency",
        "levels", "show_user", "show_group", "show_files", "raw_bytes",
        "size_width", "files_width", "top_n",
        "json_output", "gzip_output",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _emit(result: PipelineResult) -> int:
    """
    Print the report (or nothing, when a snapshot was written) and map the
    result to an exit code.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        kind = error_kind(result)
        if kind in (ERROR_ROOT, ERROR_INPUT):
            return EXIT_BAD_INPUT
        if kind == ERROR_CANCELLED:
            return EXIT_INTERRUPTED
        return EXIT_FAILURE

    for line in result.report_lines:
        print(line)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
