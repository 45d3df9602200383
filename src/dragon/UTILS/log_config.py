"""
Logging setup for the command line tool.
"""
import logging
import os
import sys
from typing import Mapping, Optional

LOG_LEVEL_VAR = "DRAGON_LOG_LEVEL"
LOG_FORMAT = "[%(name)s] %(levelname)s: %(message)s"
HANDLER_NAME = "dragon-cli"


def configure_logging(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Sends the package's log records to stderr at the level named by
    DRAGON_LOG_LEVEL (WARNING when unset or unknown).

    :return: The level that was applied.
    """
    env = os.environ if environ is None else environ
    level = logging.getLevelName(env.get(LOG_LEVEL_VAR, "WARNING").upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger("dragon")
    logger.setLevel(level)
    for existing in list(logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return level
