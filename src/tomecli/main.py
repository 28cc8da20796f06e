from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Makes the package importable when run from a source checkout, routes
execution to the CLI controller, and installs a global exception handler so
that an unexpected crash is logged and reported on stderr with exit code 1
instead of leaking a bare traceback into a completion session.
"""

import logging
import os
import sys
import traceback
from typing import Any

# -----------------------------------------------------------------------------
# ENVIRONMENT INITIALIZATION
# -----------------------------------------------------------------------------

# Anti-shadowing and path visibility logic
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, 'frozen', False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)


# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Trap unhandled exceptions and report them on stderr.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))
    error_msg = str(value)

    # Ensure the crash is persisted in logs
    logger = logging.getLogger("tomecli.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {error_msg}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (TOME-CLI)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)
    sys.exit(1)


# Hook into the Python interpreter exception flow
sys.excepthook = global_exception_handler


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main() -> int:
    """
    Delegate to the CLI controller.

    Returns:
        int: Process exit code forwarded from the CLI (or the script it ran).
    """
    try:
        from tomecli.interface.cli.app import main as cli_main
        return cli_main()

    except Exception as e:
        global_exception_handler(type(e), e, sys.exc_info()[2])
        return 1


if __name__ == "__main__":
    sys.exit(main())
