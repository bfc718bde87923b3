from __future__ import annotations

import logging
import os
import sys
from typing import Literal


def setup_logging(level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO") -> None:
    """
    Configure a simple, consistent console logger for the project.

    Inside AWS Lambda the timestamp is left out, CloudWatch stamps every line itself.
    """
    if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
        fmt = "%(levelname)s | %(name)s | %(message)s"
    else:
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    logging.basicConfig(
        level=getattr(logging, level),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # the Lambda runtime installs its own handler first
    )
