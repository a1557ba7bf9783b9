"""
Logging utilities
"""
import logging
import sys


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging for the command line and MCP entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
