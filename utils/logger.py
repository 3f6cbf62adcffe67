"""
Logging configuration for the CDK app.
"""

import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Configure Python logging with ISO timestamp and structured format."""
    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout is left to the cdk toolkit
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # jsii runtime chatter
    logging.getLogger("jsii").setLevel(logging.WARNING)
