# src/rsynckit/logging_utils.py
"""
Logging helpers for rsynckit.

Library modules only create loggers; applications call configure_logging
once to decide where the records go.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(verbosity: int = 0, debug_log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the ``rsynckit`` logger.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG

    When debug_log_file is given, a file handler capturing DEBUG records is
    added as well (appending to the file). Calling this more than once does
    not add duplicate handlers.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger = logging.getLogger("rsynckit")
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(level)
        logger.addHandler(stream_handler)
    else:
        for handler in logger.handlers:
            if type(handler) is logging.StreamHandler:
                handler.setLevel(level)

    if debug_log_file:
        debug_log_file = os.path.abspath(debug_log_file)
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == debug_log_file for h in logger.handlers):
            log_dir = os.path.dirname(debug_log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(debug_log_file, mode='a')
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)
        level = logging.DEBUG

    logger.setLevel(level)
    # Prevent duplicate output when the application configured the root logger
    logger.propagate = not logging.root.hasHandlers()
    return logger
