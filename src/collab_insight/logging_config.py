"""
Logging configuration for Collab Insight.

All package loggers live under ``collab_insight``. The CLI verbosity picks a
level for the package, and a few pipeline stages get their own floor so a
normal run still shows per-team progress without per-chunk judge chatter.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "collab_insight"

PACKAGE_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

# Stage loggers shown above the package level in a normal run.
STAGE_LEVELS = {
    "normal": {
        f"{ROOT_LOGGER}.orchestrator": logging.INFO,
        f"{ROOT_LOGGER}.roster": logging.INFO,
    },
}

# HTTP client loggers emit one line per judge request.
THIRD_PARTY_LOGGERS = ("openai", "httpx", "httpcore")


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Route collab_insight logs to stderr through a rich handler.

    Args:
        verbose: DEBUG for every stage, including per-chunk LLM_USAGE lines
        quiet: Only errors; wins over verbose

    Returns:
        The ``collab_insight`` logger
    """
    verbosity = "quiet" if quiet else "verbose" if verbose else "normal"
    level = PACKAGE_LEVELS[verbosity]

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    logging.basicConfig(
        level=logging.WARNING, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    stages = STAGE_LEVELS.get(verbosity, {})
    for name in {n for levels in STAGE_LEVELS.values() for n in levels}:
        logging.getLogger(name).setLevel(stages.get(name, logging.NOTSET))

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a module, under the collab_insight namespace.

    Args:
        name: Module name (e.g., 'collab_insight.cqi.aggregator').
              If None, returns the collab_insight logger.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
