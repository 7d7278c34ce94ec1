"""
Logging for a setup run.

Everything goes through the ``gnu_setup`` logger, which feeds two handlers:

- the console (stderr) shows diagnostics at the level chosen by -v/-q.
  Step output is already printed on stdout by render.py, so records
  tagged as step output are kept off the console.
- the optional --log-file records every level, step output included, so
  the file holds a full transcript of the run.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "gnu_setup"

# Record attribute marking a copy of a line printed by render.py
STEP_OUTPUT = "step_output"

FILE_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_logger: Optional[logging.Logger] = None


class StepOutputFilter(logging.Filter):
    """Drop records that duplicate what render.py already printed."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not getattr(record, STEP_OUTPUT, False)


class ConsoleFormatter(logging.Formatter):
    """Prefix diagnostics with a lowercase level tag such as ``[debug]``."""

    TAG_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__("%(message)s")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname.lower()}]"
        color = self.TAG_COLORS.get(record.levelno) if self.use_colors else None
        if color:
            tag = f"{color}{tag}{self.RESET}"
        return f"{tag} {super().format(record)}"


def console_level(level: str = "INFO", verbose: bool = False, quiet: bool = False) -> int:
    """Console threshold for the -v/-q switches and GNU_SETUP_DEBUG."""
    if verbose or os.environ.get("GNU_SETUP_DEBUG", "0") == "1":
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return getattr(logging, level.upper())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the gnu_setup logger.

    The logger itself always passes DEBUG; each handler applies its own
    threshold.

    Args:
        level: Console level when neither verbose nor quiet is set
        log_file: Optional file receiving every record
        verbose: DEBUG on the console
        quiet: No console handler (file only)
        propagate: Allow log propagation (useful for testing)

    Returns:
        Configured logger instance

    Raises:
        OSError: If the log file or its directory cannot be created
    """
    global _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = propagate
    _logger = logger

    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level(level, verbose=verbose, quiet=quiet))
        console.addFilter(StepOutputFilter())
        use_colors = sys.stderr.isatty() and os.environ.get("GNU_SETUP_COLOR", "1") == "1"
        console.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(console)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Return the configured logger, setting up defaults on first use."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


def log_step(level: int, msg: str) -> None:
    """Copy a line of step output into the log (file only)."""
    get_logger().log(level, msg, extra={STEP_OUTPUT: True})
