from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Installs a global exception hook so that fatal crashes are logged and
reported on stderr with a non-zero exit code, then delegates to the CLI.
"""

import logging
import sys
import traceback
from typing import Any


# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Trap unhandled exceptions, persist them in the logs and report to stderr.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    if issubclass(exctype, KeyboardInterrupt):
        print("Interrupted.", file=sys.stderr)
        sys.exit(130)

    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logger = logging.getLogger("diskusage.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (DISKUSAGE)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)
    sys.exit(1)


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main() -> int:
    """
    Console-script entry point.

    Returns:
        int: Process exit code.
    """
    sys.excepthook = global_exception_handler

    from diskusage.interface.cli.app import main as cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
