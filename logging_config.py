import logging
import sys
from logging import Logger
from typing import Optional, Union

import config


def _has_stdout_handler(logger: Logger) -> bool:
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout:
            return True
    return False


def setup_logging(log_level: Optional[Union[int, str]] = None) -> Logger:
    """
    Configure root logging to stream to stdout.
    Idempotent: safe to call multiple times without duplicating handlers.
    """
    level = log_level if log_level is not None else config.LOG_LEVEL
    logger = logging.getLogger()
    logger.setLevel(level)

    if not _has_stdout_handler(logger):
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
        logger.addHandler(ch)

    # urllib3 is chatty at DEBUG; keep it at WARNING unless asked otherwise
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger
