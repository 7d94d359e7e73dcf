"""Simple logging utilities for brute_arena.

The simulator is pure computation, so logging stays on the standard library
logger; callers embedding the package may attach their own handlers.
"""
import logging

from brute_arena.config import Settings


def get_logger(name: str = "brute_arena") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, Settings.LOG_LEVEL, logging.INFO))
    return logger
