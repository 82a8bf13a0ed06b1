# signflow/logging.py
"""
Logging setup shared by every signflow module.

    from signflow.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional, Union

from signflow.config import Config

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: Optional[Union[int, str]] = None,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stdout,
):
    """
    Configure the root logging handler.

    Called once at application startup. Calling it again only updates the level.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level if level is not None else Config.LOG_LEVEL.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
