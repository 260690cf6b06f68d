"""
Logging configuration for burrow.

The CLI is quiet by default: only warnings and errors reach stderr.
"""

import logging
import sys
import warnings


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to show only warnings and errors.

    Args:
        quiet: If True, suppress info/debug output and Python warnings.
            If False, show everything.
    """
    burrow_logger = logging.getLogger("burrow")
    if quiet:
        warnings.filterwarnings("ignore")
        burrow_logger.setLevel(logging.WARNING)
    else:
        warnings.filterwarnings("default")
        burrow_logger.setLevel(logging.NOTSET)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    # Re-enable warnings
    warnings.filterwarnings("default")

    # Configure root logger for debug output
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("burrow").setLevel(logging.DEBUG)
